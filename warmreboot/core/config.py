import os

import yaml

from .log import getLogger
from .utils import getCmdlineDict

logging = getLogger(__name__)

CONFIG_PATH = "/etc/sonic/warm-reboot.config"

class Config(object):
   instance_ = None

   def __new__(cls):
      if cls.instance_ is None:
         cls.instance_ = object.__new__(cls)
         cls.instance_._setDefaults()
         cls.instance_._parseConfig()
         cls.instance_._parseCmdline()
      return cls.instance_

   def _setDefaults(self):
      self.store_socket = '/var/run/redis/redis.sock'
      self.store_host = 'localhost'
      self.store_port = 6379
      self.store_timeout = 5.0
      self.store_dump_path = None
      self.simulation_store = '/tmp/warm-reboot-store.json'
      self.warm_dir = '/host/warmboot'
      self.snapshot_file = 'dump.rdb'
      self.handshake_interval = 0.1
      self.handshake_timeout = 60
      self.handshake_read_errors = 3
      self.sync_agent = 'syncd'
      self.sync_agent_record = 'warm-shutdown'
      self.freeze_peer = 'swss'
      self.freeze_retries = 5
      self.freeze_timeout = 10
      self.freeze_wait_ms = 2000
      self.fastfast_asics = ['mellanox']
      self.warm_components = ['system']
      self.fastfast_components = ['swss', 'syncd']
      self.peer_timeout = 10

   @classmethod
   def reset(cls):
      cls.instance_ = None

   def _getKeys(self):
      return list(self.__dict__.keys())

   @staticmethod
   def _parseVal(val):
      if not isinstance(val, str):
         return val
      yes = ['yes', 'y', 'true']
      no = ['no', 'n', 'false']
      vl = val.lower()
      if vl in yes:
         return True
      if vl in no:
         return False
      return val

   def setAttr(self, key, val):
      val = self._parseVal(val)
      v = getattr(self, key, None)
      if v is not None and isinstance(v, (int, float)) and \
            not isinstance(v, bool) and isinstance(val, str):
         try:
            val = type(v)(val)
         except ValueError:
            logging.warning('%s attr expects a number, got %r', key, val)
            return
      elif isinstance(v, list) and isinstance(val, str):
         val = [item for item in val.split(',') if item]
      if v is not None and type(v) != type(val):
         logging.warning('%s attr type changed: old %s, new %s',
                         key, type(v), type(val))
      setattr(self, key, val)

   def _parseCmdline(self):
      cmdline = getCmdlineDict()

      for key in self._getKeys():
         k = 'warmreboot.%s' % key
         if k in cmdline:
            self.setAttr(key, cmdline[k])

   def _parseConfig(self):
      if not os.path.exists(CONFIG_PATH):
         return

      try:
         with open(CONFIG_PATH, 'r') as f:
            data = yaml.safe_load(f)
      except IOError as e:
         logging.warning('cannot open file %s: %s', CONFIG_PATH, e)
         return
      except yaml.YAMLError as e:
         logging.warning('invalid %s format: %s', CONFIG_PATH, e)
         return

      if not isinstance(data, dict):
         return

      for key in self._getKeys():
         if key in data:
            self.setAttr(key, data[key])

   def get(self, confName):
      return getattr(self, confName, None)

   @property
   def snapshot_path(self):
      return os.path.join(self.warm_dir, self.snapshot_file)
