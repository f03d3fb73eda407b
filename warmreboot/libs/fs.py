import os
import time

def touch(path, mode=0o644, times=None):
   try:
      with open(path, 'a'):
         pass
      os.chmod(path, mode)
      os.utime(path, times)
   except IOError:
      return False
   return True

def rmfile(path, raises=False):
   try:
      os.remove(path)
   except (OSError, IOError):
      if raises:
         raise

def mkdirs(path):
   if not os.path.isdir(path):
      os.makedirs(path)

def timestampSuffix(now=None):
   return time.strftime('%Y%m%d-%H%M%S', time.localtime(now))

def moveAside(path, suffix=None):
   '''Rename path to path.<suffix>, returns the new path or None if absent'''
   if not os.path.exists(path):
      return None
   target = '%s.%s' % (path, suffix or timestampSuffix())
   os.rename(path, target)
   return target
