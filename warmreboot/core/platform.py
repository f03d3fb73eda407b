import yaml

from .log import getLogger
from .utils import SONIC_VERSION_PATH

logging = getLogger(__name__)

def getSonicVersionInfo(path=SONIC_VERSION_PATH):
   try:
      with open(path) as f:
         data = yaml.safe_load(f)
   except IOError as e:
      logging.debug('cannot open file %s: %s', path, e)
      return {}
   except yaml.YAMLError as e:
      logging.warning('invalid %s format: %s', path, e)
      return {}
   return data if isinstance(data, dict) else {}

def getAsicType(path=SONIC_VERSION_PATH):
   return getSonicVersionInfo(path).get('asic_type', 'unknown')
