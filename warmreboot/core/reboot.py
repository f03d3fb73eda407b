"""
Orchestration of fast, warm and fast-fast reboots.

A reboot goes through the following states:
  idle -> classifying -> preparing -> quiescing -> snapshotting -> committing

A fast reboot goes straight from classifying to committing. A fast-fast
reboot skips quiescing, orchagent is frozen instead of asking syncd for a
pre-shutdown. Any error moves the orchestrator to failed, and for warm class
reboots the rollback guard undoes the preparation.
"""

import os
import time

from .exception import ClassificationError, HandshakeError
from .flags import WarmRestartFlags
from .guard import RollbackGuard, bestEffort
from .handshake import HandshakeProtocol, HandshakeResult
from .log import getLogger
from .snapshot import SnapshotManager, fastfastProfile, warmProfile
from .utils import klog

logging = getLogger(__name__)

class RebootClass(object):
   FAST = 'fast-reboot'
   WARM = 'warm-reboot'
   FASTFAST = 'fastfast-reboot'

   WARM_CLASS = (WARM, FASTFAST)

class RebootState(object):
   IDLE = 'idle'
   CLASSIFYING = 'classifying'
   PREPARING = 'preparing'
   QUIESCING = 'quiescing'
   SNAPSHOTTING = 'snapshotting'
   COMMITTING = 'committing'
   FAILED = 'failed'
   DONE = 'done'

def classifyReboot(invocation, asicType, fastfastAsics):
   name = os.path.basename(invocation or '')
   if name == RebootClass.FAST:
      return RebootClass.FAST
   if name == RebootClass.WARM:
      if asicType in fastfastAsics:
         return RebootClass.FASTFAST
      return RebootClass.WARM
   if name == RebootClass.FASTFAST:
      if asicType not in fastfastAsics:
         raise ClassificationError('%s is not supported on %s asics' %
                                   (name, asicType))
      return RebootClass.FASTFAST
   raise ClassificationError('not supported reboot type: %s' % name)

class RebootOrchestrator(object):
   def __init__(self, store, config, kernel, syncAgent, freezeProbe,
                guard=None, force=False, clock=time.monotonic,
                sleep=time.sleep):
      self.store = store
      self.config = config
      self.kernel = kernel
      self.syncAgent = syncAgent
      self.freezeProbe = freezeProbe
      self.guard = guard or RollbackGuard()
      self.force = force
      self.handshake = HandshakeProtocol(
         store, clock=clock, sleep=sleep,
         maxReadErrors=config.handshake_read_errors)
      self.snapshot = SnapshotManager(store)
      self.flags = WarmRestartFlags(store)
      self.state = RebootState.IDLE
      self.rebootClass = None

   def __str__(self):
      return 'RebootOrchestrator(class=%s, state=%s)' % (self.rebootClass,
                                                          self.state)

   def _transition(self, state):
      logging.debug('%s -> %s', self.state, state)
      self.state = state

   def classify(self, invocation, asicType):
      self._transition(RebootState.CLASSIFYING)
      self.rebootClass = classifyReboot(invocation, asicType,
                                        self.config.fastfast_asics)
      logging.info('reboot type is %s (asic %s)', self.rebootClass, asicType)
      return self.rebootClass

   def componentsFor(self, rebootClass):
      if rebootClass == RebootClass.FASTFAST:
         return self.config.fastfast_components
      return self.config.warm_components

   def rollback(self):
      logging.warning('%s failure, cleaning up', self.rebootClass)
      bestEffort(
         self.flags.disableEnabled,
         self.kernel.unload,
         lambda: self.snapshot.setAside(self.config.snapshot_path),
      )

   def quiesce(self):
      self._transition(RebootState.QUIESCING)
      component = self.config.sync_agent_record
      self.handshake.initiate(component)
      self.syncAgent.requestPreShutdown()
      result = self.handshake.awaitCompletion(
         component,
         timeout=self.config.handshake_timeout,
         interval=self.config.handshake_interval,
      )
      if result != HandshakeResult.SUCCEEDED:
         raise HandshakeError('%s pre-shutdown %s' % (self.syncAgent, result))
      logging.info('%s pre-shutdown succeeded', self.syncAgent)

   def freeze(self):
      if self.freezeProbe.probe():
         return
      msg = '%s could not be frozen after %d attempts' % (
         self.freezeProbe, self.freezeProbe.attempts)
      if not self.force:
         raise HandshakeError(msg)
      logging.warning('%s, ignoring since forced', msg)

   def prepare(self):
      self._transition(RebootState.PREPARING)
      self.guard.arm(self.rollback)
      self.flags.enable(self.componentsFor(self.rebootClass))

      if self.rebootClass == RebootClass.WARM:
         self.quiesce()
      else:
         self.freeze()

      self._transition(RebootState.SNAPSHOTTING)
      profile = warmProfile if self.rebootClass == RebootClass.WARM \
                else fastfastProfile
      self.snapshot.capture(profile, self.config.snapshot_path)

   def commit(self):
      self._transition(RebootState.COMMITTING)
      self.kernel.load()
      self.guard.disarm()

   def run(self, invocation, asicType, execute=True):
      try:
         self.classify(invocation, asicType)
         if self.rebootClass in RebootClass.WARM_CLASS:
            with self.guard:
               self.prepare()
               self.commit()
         else:
            self.commit()
      except BaseException:
         self._transition(RebootState.FAILED)
         raise

      if not execute:
         logging.info('%s prepared, not executing the kernel', self.rebootClass)
         return self.rebootClass

      klog('Rebooting with %s', 0, self.rebootClass)
      self.kernel.execute()
      self._transition(RebootState.DONE)
      return self.rebootClass
