"""
Thin wrappers around the processes the reboot tooling pokes at.

None of these calls are trusted to report the real outcome of a warm reboot
step, the state store is. They only trigger actions in other containers or
in the kernel.
"""

import subprocess

from .exception import PeerError
from .log import getLogger
from .utils import Retrying, simulateWith

logging = getLogger(__name__)

DOCKER = '/usr/bin/docker'
KEXEC = '/sbin/kexec'
SYNCD_REQUEST_SHUTDOWN = '/usr/bin/syncd_request_shutdown'
ORCHAGENT_RESTART_CHECK = '/usr/bin/orchagent_restart_check'

def runCommandSim(cmd, timeout=None):
   logging.info('simulation: %s', ' '.join(cmd))
   return 0

@simulateWith(runCommandSim)
def runCommand(cmd, timeout=None):
   logging.debug('running: %s', ' '.join(cmd))
   try:
      proc = subprocess.run(cmd, stdout=subprocess.DEVNULL,
                            stderr=subprocess.PIPE, timeout=timeout)
   except subprocess.TimeoutExpired:
      raise PeerError('%s timed out after %ss' % (cmd[0], timeout))
   except OSError as e:
      raise PeerError('cannot run %s: %s' % (cmd[0], e))
   if proc.returncode:
      logging.debug('%s returned %d: %s', cmd[0], proc.returncode,
                    proc.stderr.decode(errors='replace').strip())
   return proc.returncode

def dockerExec(container, cmd):
   return [DOCKER, 'exec', '-i', container] + cmd

class SyncAgent(object):
   def __init__(self, container, timeout=10):
      self.container = container
      self.timeout = timeout

   def __str__(self):
      return 'SyncAgent(%s)' % self.container

   def requestPreShutdown(self):
      '''Fire and forget, the outcome is read back from the state store'''
      logging.debug('%s: requesting pre-shutdown', self)
      cmd = dockerExec(self.container, [SYNCD_REQUEST_SHUTDOWN, '--pre'])
      try:
         code = runCommand(cmd, timeout=self.timeout)
      except PeerError as e:
         logging.error('%s: failed to request pre-shutdown: %s', self, e.msg)
         return
      if code:
         logging.error('%s: failed to request pre-shutdown (code %d)', self,
                       code)

class FreezeProbe(object):
   """Ask orchagent to pause and report whether it is ready to be frozen"""
   def __init__(self, container, retries=5, timeout=10, waitMs=2000):
      self.container = container
      # at least one attempt, the probe must never run unbounded
      self.retries = max(1, int(retries))
      self.timeout = timeout
      self.waitMs = waitMs
      self.attempts = 0

   def __str__(self):
      return 'FreezeProbe(%s)' % self.container

   def command(self):
      return dockerExec(self.container, [
         ORCHAGENT_RESTART_CHECK, '-w', str(self.waitMs), '-r', '1'
      ])

   def attempt(self):
      try:
         return runCommand(self.command(), timeout=self.timeout) == 0
      except PeerError as e:
         logging.debug('%s: %s', self, e.msg)
         return False

   def probe(self):
      self.attempts = 0
      for r in Retrying(interval=None, delay=0, maxAttempts=self.retries):
         self.attempts = r.attempt
         if self.attempt():
            logging.info('%s: frozen after %d attempt(s)', self,
                         self.attempts)
            return True
         logging.warning('%s: attempt %d/%d failed', self, self.attempts,
                         self.retries)
      return False

class Kexec(object):
   def __init__(self, image=None, initrd=None, append=None, timeout=60):
      self.image = image
      self.initrd = initrd
      self.append = append
      self.timeout = timeout
      self.loaded = False

   def __str__(self):
      return 'Kexec(%s)' % self.image

   def load(self):
      if not self.image:
         raise PeerError('no kernel image to load')
      cmd = [KEXEC, '--load', self.image]
      if self.initrd:
         cmd.append('--initrd=%s' % self.initrd)
      if self.append:
         cmd.append('--append=%s' % self.append)
      code = runCommand(cmd, timeout=self.timeout)
      if code:
         raise PeerError('failed to load %s (code %d)' % (self.image, code))
      self.loaded = True
      logging.debug('%s: kernel queued for load', self)

   def unload(self):
      logging.debug('%s: unloading kernel', self)
      code = runCommand([KEXEC, '--unload'], timeout=self.timeout)
      if code:
         raise PeerError('failed to unload kernel (code %d)' % code)
      self.loaded = False

   def execute(self):
      if not self.loaded:
         raise PeerError('no kernel loaded')
      code = runCommand([KEXEC, '--exec'], timeout=self.timeout)
      if code:
         raise PeerError('failed to execute %s (code %d)' % (self.image, code))
