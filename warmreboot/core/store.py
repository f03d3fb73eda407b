"""
Client side of the shared state store.

The store is the only channel between the reboot tooling and the peer
processes (syncd, orchagent, ...). It is organized in numbered namespaces,
each holding string keys mapped to hashes. Components never talk to the
store directly, they are handed a StateStore and work on the Namespace
handles it gives out.

Two backends are provided:
 - RedisStateStore, the SONiC database, used on a real switch
 - MemoryStateStore, a locked in-memory copy persisted as json, used in
   simulation and by the tests
"""

import fnmatch
import json
import os
import threading

from functools import wraps

import redis

from .exception import StoreError
from .log import getLogger

logging = getLogger(__name__)

APPL_DB = 0
ASIC_DB = 1
COUNTERS_DB = 2
LOGLEVEL_DB = 3
CONFIG_DB = 4
FLEX_COUNTER_DB = 5
STATE_DB = 6

namespaceNames = {
   APPL_DB: 'APPL_DB',
   ASIC_DB: 'ASIC_DB',
   COUNTERS_DB: 'COUNTERS_DB',
   LOGLEVEL_DB: 'LOGLEVEL_DB',
   CONFIG_DB: 'CONFIG_DB',
   FLEX_COUNTER_DB: 'FLEX_COUNTER_DB',
   STATE_DB: 'STATE_DB',
}

def namespaceName(ns):
   return namespaceNames.get(ns, 'DB%d' % ns)

def matchesPrefix(key, prefixes):
   return any(key.startswith(prefix) for prefix in prefixes)

class Namespace(object):
   """Capability on a single namespace of a store"""
   def __init__(self, store, index):
      self.store = store
      self.index = index

   def __str__(self):
      return '%s(%s)' % (self.__class__.__name__, namespaceName(self.index))

   def get(self, key, field):
      return self.store.getField(self.index, key, field)

   def getAll(self, key):
      return self.store.getAllFields(self.index, key)

   def set(self, key, field, value):
      self.store.setField(self.index, key, field, value)

   def setMultiple(self, key, fields):
      self.store.setFields(self.index, key, fields)

   def delete(self, key):
      self.store.deleteKey(self.index, key)

   def keys(self, pattern='*'):
      return self.store.listKeys(self.index, pattern)

   def filter(self, keepPrefixes):
      return self.store.filterKeys(self.index, keepPrefixes)

   def drop(self):
      self.store.dropNamespace(self.index)

class StateStore(object):
   def namespace(self, index):
      return Namespace(self, index)

   def getField(self, ns, key, field):
      raise NotImplementedError

   def getAllFields(self, ns, key):
      raise NotImplementedError

   def setField(self, ns, key, field, value):
      raise NotImplementedError

   def setFields(self, ns, key, fields):
      raise NotImplementedError

   def deleteKey(self, ns, key):
      raise NotImplementedError

   def listKeys(self, ns, pattern='*'):
      raise NotImplementedError

   def filterKeys(self, ns, keepPrefixes):
      '''Atomically delete every key of ns not starting with keepPrefixes'''
      raise NotImplementedError

   def dropNamespace(self, ns):
      raise NotImplementedError

   def flushToDisk(self):
      '''Persist the whole store, returns the path of the resulting file'''
      raise NotImplementedError

# Runs server side so that no reader can observe a partially filtered
# namespace. ARGV holds the prefixes to keep.
FILTER_SCRIPT = """
local removed = 0
for _, key in ipairs(redis.call('KEYS', '*')) do
   local keep = false
   for _, prefix in ipairs(ARGV) do
      if string.sub(key, 1, string.len(prefix)) == prefix then
         keep = true
         break
      end
   end
   if not keep then
      redis.call('DEL', key)
      removed = removed + 1
   end
end
return removed
"""

def storeOperation(func):
   @wraps(func)
   def wrapper(self, *args, **kwargs):
      try:
         return func(self, *args, **kwargs)
      except redis.RedisError as e:
         raise StoreError('%s failed: %s' % (func.__name__, e))
   return wrapper

class RedisStateStore(StateStore):
   def __init__(self, socketPath=None, host='localhost', port=6379,
                timeout=5.0, dumpPath=None):
      self.socketPath = socketPath
      self.host = host
      self.port = port
      self.timeout = timeout
      self.dumpPath = dumpPath
      self.clients_ = {}

   def __str__(self):
      target = self.socketPath or '%s:%d' % (self.host, self.port)
      return '%s(%s)' % (self.__class__.__name__, target)

   def client(self, ns):
      client = self.clients_.get(ns)
      if client is not None:
         return client

      if self.socketPath and os.path.exists(self.socketPath):
         client = redis.Redis(unix_socket_path=self.socketPath, db=ns,
                              socket_timeout=self.timeout,
                              decode_responses=True)
      else:
         client = redis.Redis(host=self.host, port=self.port, db=ns,
                              socket_timeout=self.timeout,
                              decode_responses=True)
      self.clients_[ns] = client
      return client

   @storeOperation
   def getField(self, ns, key, field):
      return self.client(ns).hget(key, field)

   @storeOperation
   def getAllFields(self, ns, key):
      return self.client(ns).hgetall(key)

   @storeOperation
   def setField(self, ns, key, field, value):
      self.client(ns).hset(key, field, value)

   @storeOperation
   def setFields(self, ns, key, fields):
      self.client(ns).hset(key, mapping=fields)

   @storeOperation
   def deleteKey(self, ns, key):
      self.client(ns).delete(key)

   @storeOperation
   def listKeys(self, ns, pattern='*'):
      return sorted(self.client(ns).keys(pattern))

   @storeOperation
   def filterKeys(self, ns, keepPrefixes):
      removed = self.client(ns).eval(FILTER_SCRIPT, 0, *sorted(keepPrefixes))
      logging.debug('%s: filtered %s, %s keys removed', self, namespaceName(ns),
                    removed)
      return removed

   @storeOperation
   def dropNamespace(self, ns):
      self.client(ns).flushdb()

   @storeOperation
   def flushToDisk(self):
      client = self.client(0)
      client.save()
      if self.dumpPath:
         return self.dumpPath
      directory = client.config_get('dir')['dir']
      filename = client.config_get('dbfilename')['dbfilename']
      return os.path.join(directory, filename)

class MemoryStateStore(StateStore):
   def __init__(self, path=None):
      self.path = path
      self.lock_ = threading.RLock()
      self.data_ = {}
      if path and os.path.exists(path):
         self._load()

   def __str__(self):
      return '%s(%s)' % (self.__class__.__name__, self.path)

   def _load(self):
      try:
         with open(self.path) as f:
            data = json.load(f)
      except (IOError, OSError, ValueError) as e:
         raise StoreError('cannot load %s: %s' % (self.path, e))
      self.data_ = {int(ns): content for ns, content in data.items()}

   def _ns(self, ns):
      return self.data_.setdefault(ns, {})

   def getField(self, ns, key, field):
      with self.lock_:
         return self._ns(ns).get(key, {}).get(field)

   def getAllFields(self, ns, key):
      with self.lock_:
         return dict(self._ns(ns).get(key, {}))

   def setField(self, ns, key, field, value):
      with self.lock_:
         self._ns(ns).setdefault(key, {})[field] = str(value)

   def setFields(self, ns, key, fields):
      with self.lock_:
         entry = self._ns(ns).setdefault(key, {})
         entry.update({field: str(value) for field, value in fields.items()})

   def deleteKey(self, ns, key):
      with self.lock_:
         self._ns(ns).pop(key, None)

   def listKeys(self, ns, pattern='*'):
      with self.lock_:
         return sorted(key for key in self._ns(ns)
                       if fnmatch.fnmatchcase(key, pattern))

   def filterKeys(self, ns, keepPrefixes):
      with self.lock_:
         content = self._ns(ns)
         removed = [key for key in content
                    if not matchesPrefix(key, keepPrefixes)]
         for key in removed:
            del content[key]
      logging.debug('%s: filtered %s, %d keys removed', self,
                    namespaceName(ns), len(removed))
      return len(removed)

   def dropNamespace(self, ns):
      with self.lock_:
         self.data_[ns] = {}

   def flushToDisk(self):
      if not self.path:
         raise StoreError('%s has no backing file' % self)
      with self.lock_:
         content = {str(ns): data for ns, data in self.data_.items() if data}
         try:
            with open(self.path, 'w') as f:
               json.dump(content, f, indent=3, sort_keys=True)
         except (IOError, OSError) as e:
            raise StoreError('cannot save %s: %s' % (self.path, e))
      return self.path

def getStateStore(config, simulation=False):
   if simulation:
      return MemoryStateStore(config.simulation_store)
   return RedisStateStore(socketPath=config.store_socket,
                          host=config.store_host,
                          port=config.store_port,
                          timeout=config.store_timeout,
                          dumpPath=config.store_dump_path)
