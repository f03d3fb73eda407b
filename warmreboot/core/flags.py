from .log import getLogger
from .store import STATE_DB

logging = getLogger(__name__)

WARM_RESTART_ENABLE_TABLE = 'WARM_RESTART_ENABLE_TABLE'

def enableKey(component):
   return '%s|%s' % (WARM_RESTART_ENABLE_TABLE, component)

class WarmRestartFlags(object):
   """Warm restart intent of the components, as read by them on startup

   Only the flags turned on through this object are turned off again by
   disableEnabled(), flags set by an operator beforehand are left alone.
   """
   def __init__(self, store):
      self.db = store.namespace(STATE_DB)
      self.enabled = []

   def isEnabled(self, component):
      return self.db.get(enableKey(component), 'enable') == 'true'

   def enable(self, components):
      for component in components:
         logging.debug('enabling warm restart for %s', component)
         self.db.set(enableKey(component), 'enable', 'true')
         if component not in self.enabled:
            self.enabled.append(component)

   def disable(self, component):
      logging.debug('disabling warm restart for %s', component)
      self.db.set(enableKey(component), 'enable', 'false')
      if component in self.enabled:
         self.enabled.remove(component)

   def disableEnabled(self):
      for component in list(self.enabled):
         self.disable(component)

   def status(self):
      prefix = '%s|' % WARM_RESTART_ENABLE_TABLE
      return {
         key[len(prefix):]: self.db.get(key, 'enable')
         for key in self.db.keys('%s*' % prefix)
      }
