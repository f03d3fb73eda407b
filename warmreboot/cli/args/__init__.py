from collections import OrderedDict, namedtuple

Parser = namedtuple('Parser', ['name', 'func', 'kwargs'])

registeredParsers = OrderedDict()

def registerParser(name, **kwargs):
   '''Arguments to provide to a subparser'''
   def decorator(func):
      registeredParsers[name] = Parser(name, func, kwargs)
      return func
   return decorator

def getParsers():
   return registeredParsers.values()

def getParser(name):
   return registeredParsers.get(name)

# pylint: disable=wrong-import-position
from . import clean, reboot, status
