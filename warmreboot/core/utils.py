import os
import time

from functools import wraps

from .log import getLogger

logging = getLogger(__name__)

CMDLINE_PATH = '/proc/cmdline'
SONIC_VERSION_PATH = '/etc/sonic/sonic_version.yml'

def klogSim(msg, level=2, *args):
   logging.info(msg, *args)

def klog(msg, level=2, *args):
   if inSimulation():
      return klogSim(msg, level, *args)
   try:
      with open('/dev/kmsg', 'w') as f:
         f.write('<%d>warm-reboot: %s\n' % (level, msg % args))
   except (IOError, OSError):
      logging.debug('cannot write to /dev/kmsg: %s', msg % args)

class Retrying(object):
   """Bounded attempt iterator.

   Stops after maxAttempts iterations or once interval seconds have elapsed
   since the first attempt, sleeping delay seconds between two attempts.
   The clock and the sleep are injectable so that loops built on top of it
   can be driven by a fake clock.
   """
   def __init__(self, interval=1.0, delay=0.05, maxAttempts=None,
                clock=time.monotonic, sleep=time.sleep):
      self.interval = interval
      self.delay = delay
      self.maxAttempts = maxAttempts
      self.clock = clock
      self.sleep = sleep

   def __iter__(self):
      retrying = self

      class Iterator(object):
         def __init__(self):
            self.attempt = 0
            self.startedAt_ = retrying.clock()

         def __next__(self):
            if self.attempt and retrying.delay:
               retrying.sleep(retrying.delay)
            if self.isExpired() or \
               retrying.maxAttempts is not None and \
               self.attempt >= retrying.maxAttempts:
               raise StopIteration
            self.attempt += 1
            return self

         def isExpired(self):
            return retrying.interval and \
               retrying.clock() - self.startedAt_ >= retrying.interval

      return Iterator()

cmdlineDict = {}
def getCmdlineDict():
   global cmdlineDict

   if cmdlineDict:
      return cmdlineDict

   data = {}
   try:
      with open(CMDLINE_PATH) as f:
         content = f.read()
   except (IOError, OSError):
      logging.debug('cannot read %s', CMDLINE_PATH)
      return data

   for entry in content.split():
      idx = entry.find('=')
      if idx == -1:
         data[entry] = None
      else:
         data[entry[:idx]] = entry[idx+1:]

   cmdlineDict = data
   return data

# force simulation to be True if not on a SONiC box
simulation = True

def inSimulation():
   return simulation

def setSimulation(value):
   global simulation
   simulation = value

def runningInContainer():
   # Docker containers by default have this path.
   return os.path.exists("/.dockerenv")

def simulateWith(simulatedFunc):
   def simulateThisFunc(func):
      @wraps(func)
      def funcWrapper(*args, **kwargs):
         if inSimulation():
            return simulatedFunc(*args, **kwargs)
         return func(*args, **kwargs)
      return funcWrapper
   return simulateThisFunc

def libraryInit():
   global simulation

   if os.path.exists(SONIC_VERSION_PATH) and not runningInContainer():
      simulation = False

   if 'warmreboot.simulation' in getCmdlineDict():
      simulation = True

libraryInit()
