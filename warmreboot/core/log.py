import logging
import logging.handlers
import os
import re
import socket
import sys

from logging import DEBUG, INFO, WARNING, ERROR

logLevelDict = {
   'DEBUG': DEBUG,
   'INFO': INFO,
   'WARNING': WARNING,
   'ERROR': ERROR,
}

dateFmt = '%Y-%m-%d %H:%M:%S'

DEFAULT_IDENT = 'warmreboot'
SYSLOG_SOCKET = '/dev/log'

class LoggerError(Exception):
   def __init__(self, msg, code=1):
      self.code = code
      self.msg = msg

   def __str__(self):
      return 'LoggerError: %s (code %d)' % (self.msg, self.code)

class LoggerManager(object):
   def __init__(self):
      self.cliVerbosityDict = {}
      self.logfile = None
      self.syslog = False
      self.ident = DEFAULT_IDENT
      self.loggers = {}
      self.fileHandler_ = None

   def logfileHandler(self):
      # every logger appends to the same open file
      if self.fileHandler_ is None:
         self.fileHandler_ = logging.FileHandler(self.logfile)
         self.fileHandler_.setFormatter(logging.Formatter(
               '%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s',
               datefmt=dateFmt))
         self.fileHandler_.setLevel(DEBUG)
      return self.fileHandler_

   def syslogHandler(self, level):
      if os.path.exists(SYSLOG_SOCKET):
         handler = logging.handlers.SysLogHandler(address=SYSLOG_SOCKET)
      else:
         handler = logging.handlers.SysLogHandler()
      handler.setFormatter(logging.Formatter(
            '{} {}: %(message)s'.format(getHostname(), self.ident)))
      handler.setLevel(level)
      return handler

   def initLogger(self, logger, cliLevel, syslogLevel):
      # loggers are named after their module, keep them away from the root
      # handlers so that each one honors its own verbosity
      logger.propagate = False

      logger.setLevel(DEBUG)
      if cliLevel:
         logOut = logging.StreamHandler(sys.stdout)
         logOut.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
         logOut.setLevel(cliLevel)
         logger.addHandler(logOut)
      else:
         logger.addHandler(logging.NullHandler())

      if self.logfile:
         logger.addHandler(self.logfileHandler())

      if self.syslog:
         logger.addHandler(self.syslogHandler(syslogLevel))

      return logger

   def newLogger(self, name, cliLevel=INFO, syslogLevel=WARNING):
      if name.startswith('warmreboot.'):
         name = name[len('warmreboot.'):]

      logger = self.loggers.get(name)
      if logger is not None:
         return logger

      # verbosity patterns select the loggers printed on the cli, the
      # others are only sent to the logfile and syslog
      if self.cliVerbosityDict:
         for pattern, level in self.cliVerbosityDict.items():
            if pattern.match(name):
               if level:
                  cliLevel = level
               break
         else:
            cliLevel = None

      logger = logging.getLogger(name)
      if logger not in self.loggers.values():
         self.initLogger(logger, cliLevel, syslogLevel)
         self.loggers[name] = logger
      return logger

   def reset(self):
      for logger in self.loggers.values():
         for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
      self.loggers = {}
      self.fileHandler_ = None

class Logger(object):
   def __init__(self, name, cliLevel=INFO, syslogLevel=WARNING):
      self.name = name
      self.cliLevel = cliLevel
      self.syslogLevel = syslogLevel
      self.logger = None

   def log(self, level, msg, *args, **kwargs):
      if self.logger is None or \
            self.logger not in loggerManager.loggers.values():
         self.logger = loggerManager.newLogger(self.name,
                                               self.cliLevel,
                                               self.syslogLevel)

      self.logger.log(level, msg, *args, **kwargs)

   def debug(self, msg, *args, **kwargs):
      self.log(DEBUG, msg, *args, **kwargs)

   def info(self, msg, *args, **kwargs):
      self.log(INFO, msg, *args, **kwargs)

   def warning(self, msg, *args, **kwargs):
      self.log(WARNING, msg, *args, **kwargs)

   def error(self, msg, *args, **kwargs):
      self.log(ERROR, msg, *args, **kwargs)

def getLogger(name, cliLevel=INFO, syslogLevel=WARNING):
   return Logger(name, cliLevel=cliLevel, syslogLevel=syslogLevel)

def setupLogging(verbosity=None, logfile=None, syslog=False, ident=None):
   loggerManager.reset()
   loggerManager.ident = ident or DEFAULT_IDENT
   loggerManager.cliVerbosityDict = parseVerbosity(verbosity)
   loggerManager.logfile = logfile
   loggerManager.syslog = syslog

def parseVerbosity(verbosity):
   verbosityDict = {}

   if not verbosity:
      return verbosityDict

   # Log levels are seperated by ','
   # Each element can be 'abc' (default level is used) or 'abc/LEVEL'
   # It is also possible to use a python regex, e.g. 'ab.' or 'ab./LEVEL'

   for el in verbosity.split(','):
      pattern = el
      logLevel = None

      if el.count('/') > 1:
         raise LoggerError('Invalid verbosity argument')
      elif el.count('/') == 1:
         pattern, logLevelStr = el.split('/')
         if logLevelStr not in logLevelDict:
            raise LoggerError('Invalid log level: %s' % logLevelStr)
         logLevel = logLevelDict[logLevelStr]

      try:
         verbosityDict[re.compile(pattern)] = logLevel
      except re.error as e:
         raise LoggerError('Invalid verbosity: %s' % str(e))

   return verbosityDict

def getHostname():
   try:
      return socket.gethostname()
   except OSError:
      return 'localhost'

loggerManager = LoggerManager()
