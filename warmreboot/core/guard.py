"""
Scoped rollback of a warm reboot preparation.

Once armed, the guard runs its cleanup exactly once if the preparation does
not complete: an exception leaving the guarded block, a termination signal or
the interpreter exiting all end up in fire(). The success path disarms the
guard, after which nothing is ever run.
"""

import atexit
import signal

from .log import getLogger

logging = getLogger(__name__)

def _signals(*names):
   return [getattr(signal, name) for name in names if hasattr(signal, name)]

TERMINATION_SIGNALS = _signals(
   'SIGHUP',
   'SIGINT',
   'SIGQUIT',
   'SIGTERM',
   'SIGKILL',
   'SIGABRT',
   'SIGFPE',
)

def bestEffort(*steps):
   '''Run every step, a failing step never prevents the next ones'''
   failed = 0
   for step in steps:
      try:
         step()
      except Exception as e: # pylint: disable=broad-except
         failed += 1
         logging.error('cleanup step %s failed: %s',
                       getattr(step, '__name__', step), e)
   return failed

class RollbackGuard(object):
   def __init__(self, signals=None):
      self.signals = TERMINATION_SIGNALS if signals is None else signals
      self.onFire = None
      self.armed = False
      self.fired = False
      self.firing = False
      self.previousHandlers_ = {}

   def __str__(self):
      return 'RollbackGuard(armed=%s, fired=%s)' % (self.armed, self.fired)

   def arm(self, onFire):
      assert not self.armed, 'guard already armed'
      self.onFire = onFire
      self.armed = True
      self.fired = False
      self._installHandlers()
      atexit.register(self.fire)
      logging.debug('rollback guard armed')

   def disarm(self):
      if not self.armed:
         return
      self.armed = False
      self._restoreHandlers()
      atexit.unregister(self.fire)
      logging.debug('rollback guard disarmed')

   def fire(self):
      if not self.armed or self.fired:
         return
      self.fired = True
      self.firing = True
      logging.warning('rolling back warm reboot preparation')
      try:
         self.onFire()
      finally:
         self.firing = False
         self.disarm()

   def _handleSignal(self, signum, frame):
      if self.firing:
         # cleanup already running, let it complete
         logging.warning('ignoring signal %d during rollback', signum)
         return
      logging.error('received signal %d', signum)
      self.fire()
      raise SystemExit(128 + signum)

   def _installHandlers(self):
      for signum in self.signals:
         try:
            self.previousHandlers_[signum] = signal.signal(signum,
                                                           self._handleSignal)
         except (OSError, RuntimeError, ValueError) as e:
            # SIGKILL can't be trapped
            logging.debug('cannot trap signal %d: %s', signum, e)

   def _restoreHandlers(self):
      for signum, handler in self.previousHandlers_.items():
         try:
            signal.signal(signum,
                          signal.SIG_DFL if handler is None else handler)
         except (OSError, RuntimeError, ValueError) as e:
            logging.debug('cannot restore handler of signal %d: %s', signum, e)
      self.previousHandlers_ = {}

   def __enter__(self):
      return self

   def __exit__(self, excType, excVal, traceback):
      if excType is not None:
         self.fire()
      return False
