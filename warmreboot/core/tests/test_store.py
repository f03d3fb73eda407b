import os

import redis

from ...tests.testing import StoreTestCase, patch, unittest
from ..exception import StoreError
from ..store import (
   APPL_DB,
   FILTER_SCRIPT,
   STATE_DB,
   MemoryStateStore,
   RedisStateStore,
   getStateStore,
   namespaceName,
)

class MemoryStateStoreTest(StoreTestCase):
   def testFieldAccess(self):
      db = self.store.namespace(STATE_DB)
      self.assertIsNone(db.get('WARM_RESTART_TABLE|bgp', 'state'))
      db.set('WARM_RESTART_TABLE|bgp', 'state', 'idle')
      db.setMultiple('WARM_RESTART_TABLE|bgp', {'restore_count': 3})
      self.assertEqual(db.get('WARM_RESTART_TABLE|bgp', 'state'), 'idle')
      self.assertEqual(db.getAll('WARM_RESTART_TABLE|bgp'),
                       {'state': 'idle', 'restore_count': '3'})

   def testNamespacesAreIndependent(self):
      self.store.namespace(APPL_DB).set('KEY', 'field', 'appl')
      self.store.namespace(STATE_DB).set('KEY', 'field', 'state')
      self.assertEqual(self.store.namespace(APPL_DB).get('KEY', 'field'),
                       'appl')
      self.store.namespace(APPL_DB).drop()
      self.assertEqual(self.store.namespace(APPL_DB).keys(), [])
      self.assertEqual(self.store.namespace(STATE_DB).keys(), ['KEY'])

   def testKeysAndDelete(self):
      db = self.store.namespace(APPL_DB)
      for key in ['ROUTE_TABLE:10.0.0.0/8', 'ROUTE_TABLE:0.0.0.0/0',
                  'NEIGH_TABLE:Ethernet0:10.0.0.1']:
         db.set(key, 'nexthop', '10.0.0.1')
      self.assertEqual(db.keys('ROUTE_TABLE:*'),
                       ['ROUTE_TABLE:0.0.0.0/0', 'ROUTE_TABLE:10.0.0.0/8'])
      db.delete('ROUTE_TABLE:0.0.0.0/0')
      db.delete('ROUTE_TABLE:unknown')
      self.assertEqual(len(db.keys()), 2)

   def testFilterKeepsPrefixes(self):
      db = self.store.namespace(0)
      db.set('ROUTE_TABLE|1', 'nexthop', '10.0.0.1')
      db.set('NEIGH_TABLE|1', 'neigh', '00:11:22:33:44:55')
      removed = db.filter({'ROUTE_TABLE'})
      self.assertEqual(removed, 1)
      self.assertEqual(db.keys(), ['ROUTE_TABLE|1'])

   def testFilterIsIdempotent(self):
      db = self.store.namespace(STATE_DB)
      for key in ['FDB_TABLE|Vlan1000:00:11:22:33:44:55',
                  'WARM_RESTART_TABLE|syncd', 'PORT_TABLE|Ethernet0',
                  'NEIGH_STATE_TABLE|10.0.0.1']:
         db.set(key, 'field', 'value')
      keep = {'FDB_TABLE|', 'WARM_RESTART_TABLE|'}
      db.filter(keep)
      once = db.keys()
      self.assertEqual(db.filter(keep), 0)
      self.assertEqual(db.keys(), once)
      self.assertEqual(once, ['FDB_TABLE|Vlan1000:00:11:22:33:44:55',
                              'WARM_RESTART_TABLE|syncd'])

   def testFlushToDiskPersists(self):
      self.store.namespace(STATE_DB).set('WARM_RESTART_TABLE|syncd',
                                         'restore_count', '1')
      path = self.store.flushToDisk()
      self.assertEqual(path, self.config.simulation_store)
      self.assertTrue(os.path.exists(path))

      reloaded = MemoryStateStore(path)
      self.assertEqual(reloaded.namespace(STATE_DB).get(
         'WARM_RESTART_TABLE|syncd', 'restore_count'), '1')

   def testFlushWithoutBackingFile(self):
      with self.assertRaises(StoreError):
         MemoryStateStore().flushToDisk()

   def testCorruptedBackingFile(self):
      with open(self.config.simulation_store, 'w') as f:
         f.write('{not json')
      with self.assertRaises(StoreError):
         MemoryStateStore(self.config.simulation_store)

   def testGetStateStore(self):
      self.assertIsInstance(getStateStore(self.config, simulation=True),
                            MemoryStateStore)
      self.assertIsInstance(getStateStore(self.config, simulation=False),
                            RedisStateStore)

   def testNamespaceName(self):
      self.assertEqual(namespaceName(STATE_DB), 'STATE_DB')
      self.assertEqual(namespaceName(12), 'DB12')

class RedisStateStoreTest(unittest.TestCase):
   def setUp(self):
      self.redisPatch = patch.object(redis, 'Redis')
      self.redisCls = self.redisPatch.start()
      self.client = self.redisCls.return_value
      self.store = RedisStateStore(socketPath='/nonexistent/redis.sock')

   def tearDown(self):
      self.redisPatch.stop()

   def testClientPerNamespace(self):
      self.store.namespace(STATE_DB).get('KEY', 'field')
      self.store.namespace(STATE_DB).get('KEY', 'other')
      self.store.namespace(APPL_DB).get('KEY', 'field')
      self.assertEqual(self.redisCls.call_count, 2)
      _, kwargs = self.redisCls.call_args_list[0]
      self.assertEqual(kwargs['db'], STATE_DB)
      self.assertEqual(kwargs['host'], 'localhost')
      self.assertTrue(kwargs['decode_responses'])

   def testFilterRunsServerSide(self):
      self.client.eval.return_value = 4
      removed = self.store.namespace(APPL_DB).filter(
         {'WARM_RESTART_TABLE|', 'ROUTE_TABLE:'})
      self.assertEqual(removed, 4)
      self.client.eval.assert_called_once_with(
         FILTER_SCRIPT, 0, 'ROUTE_TABLE:', 'WARM_RESTART_TABLE|')
      self.client.keys.assert_not_called()
      self.client.delete.assert_not_called()

   def testSetMultiple(self):
      self.store.namespace(STATE_DB).setMultiple('KEY', {'a': '1'})
      self.client.hset.assert_called_once_with('KEY', mapping={'a': '1'})

   def testErrorsAreWrapped(self):
      self.client.hget.side_effect = redis.ConnectionError('refused')
      with self.assertRaises(StoreError) as cm:
         self.store.namespace(STATE_DB).get('KEY', 'field')
      self.assertIn('refused', cm.exception.msg)

   def testFlushToDiskLocatesDump(self):
      self.client.config_get.side_effect = [
         {'dir': '/var/lib/redis'},
         {'dbfilename': 'dump.rdb'},
      ]
      self.assertEqual(self.store.flushToDisk(), '/var/lib/redis/dump.rdb')
      self.client.save.assert_called_once_with()

   def testFlushToDiskConfiguredPath(self):
      store = RedisStateStore(dumpPath='/tmp/dump.rdb')
      self.assertEqual(store.flushToDisk(), '/tmp/dump.rdb')
      self.client.config_get.assert_not_called()

   def testDropNamespace(self):
      self.store.namespace(5).drop()
      self.client.flushdb.assert_called_once_with()
      self.assertEqual(self.redisCls.call_args[1]['db'], 5)

if __name__ == '__main__':
   unittest.main()
