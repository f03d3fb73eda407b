"""
Request / acknowledge exchange with a peer through the state store.

The orchestrator creates the handoff record of a component and sets its
state to requesting. The peer is the only writer of the terminal state, the
orchestrator then polls the record until the peer answers or the deadline
expires. Nothing but the stored state is trusted: a peer that cannot be
reached simply never answers.
"""

import time

from .exception import HandshakeError, StoreError
from .log import getLogger
from .store import STATE_DB

logging = getLogger(__name__)

WARM_RESTART_TABLE = 'WARM_RESTART_TABLE'

STATE_IDLE = 'idle'
STATE_REQUESTING = 'requesting'
STATE_SUCCEEDED = 'pre-shutdown-succeeded'
STATE_FAILED = 'pre-shutdown-failed'

class HandshakeResult(object):
   SUCCEEDED = 'succeeded'
   FAILED = 'failed'
   TIMEDOUT = 'timedout'

def handoffKey(component):
   return '%s|%s' % (WARM_RESTART_TABLE, component)

class HandoffRecord(object):
   def __init__(self, component, state=None, restoreCount=None):
      self.component = component
      self.state = state
      self.restoreCount = restoreCount

   def __str__(self):
      return 'HandoffRecord(component=%s, state=%s, restore_count=%s)' % (
         self.component, self.state, self.restoreCount)

class HandshakeProtocol(object):
   DEFAULT_INTERVAL = 0.1
   DEFAULT_TIMEOUT = 60
   DEFAULT_READ_ERRORS = 3

   def __init__(self, store, clock=time.monotonic, sleep=time.sleep,
                maxReadErrors=DEFAULT_READ_ERRORS):
      self.db = store.namespace(STATE_DB)
      self.clock = clock
      self.sleep = sleep
      self.maxReadErrors = maxReadErrors
      self.polls = 0

   def read(self, component):
      fields = self.db.getAll(handoffKey(component))
      restoreCount = fields.get('restore_count')
      return HandoffRecord(
         component,
         state=fields.get('state'),
         restoreCount=int(restoreCount) if restoreCount is not None else None,
      )

   def initiate(self, component):
      key = handoffKey(component)
      if self.db.get(key, 'restore_count') is None:
         logging.debug('creating handoff record %s', key)
         self.db.set(key, 'restore_count', '0')
      self.db.set(key, 'state', STATE_REQUESTING)
      logging.debug('%s: state set to %s', key, STATE_REQUESTING)

   def awaitCompletion(self, component, timeout=DEFAULT_TIMEOUT,
                       interval=DEFAULT_INTERVAL):
      key = handoffKey(component)
      if interval <= 0 or timeout < 0:
         raise HandshakeError('invalid poll interval %s or timeout %s' %
                              (interval, timeout))
      maxPolls = max(1, int(round(float(timeout) / interval)))
      deadline = self.clock() + timeout
      state = STATE_REQUESTING
      readErrors = 0
      self.polls = 0

      logging.debug('waiting for %s to leave %s (%d polls max)', key,
                    STATE_REQUESTING, maxPolls)
      while self.polls < maxPolls and self.clock() < deadline:
         self.polls += 1
         try:
            state = self.db.get(key, 'state')
            readErrors = 0
         except StoreError as e:
            readErrors += 1
            logging.debug('%s: read failed (%d/%d): %s', key, readErrors,
                          self.maxReadErrors, e)
            if readErrors >= self.maxReadErrors:
               logging.error('%s: giving up after %d read failures', key,
                             readErrors)
               return HandshakeResult.TIMEDOUT
            state = STATE_REQUESTING
         if state != STATE_REQUESTING:
            break
         self.sleep(interval)

      if state == STATE_SUCCEEDED:
         logging.debug('%s: %s after %d polls', key, state, self.polls)
         return HandshakeResult.SUCCEEDED
      if state == STATE_REQUESTING:
         logging.error('%s: timed out after %d polls', key, self.polls)
         return HandshakeResult.TIMEDOUT
      logging.error('%s: peer answered %s', key, state)
      return HandshakeResult.FAILED
