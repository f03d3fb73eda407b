import importlib

from collections import namedtuple

from ..args import getParser, getParsers
from ...core.log import getLogger

logging = getLogger(__name__)

Action = namedtuple('Action', ['name', 'func', 'needsRoot'])

registeredActions = {}

class CliContext(object):
   def __init__(self, config=None, store=None):
      self.config = config
      self.store = store

def registerAction(parserFunc, needsRoot=True):
   '''Register an action function for a subparser'''
   def decorator(func):
      name = getParserName(parserFunc)
      registeredActions[name] = Action(name, func, needsRoot)
      return func
   return decorator

def getParserName(parserFunc):
   for parser in getParsers():
      if parser.func is parserFunc:
         return parser.name
   raise ValueError('parser %s is not registered' % parserFunc.__name__)

def getAction(name):
   if name not in registeredActions:
      parser = getParser(name)
      if parser is None:
         return None
      module = parser.func.__module__
      actionModule = '.cli.actions.%s' % module[module.rfind('.') + 1:]
      logging.debug('Loading action module %s', actionModule)
      importlib.import_module(actionModule, package='warmreboot')
   return registeredActions.get(name)
