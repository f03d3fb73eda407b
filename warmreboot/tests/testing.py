# pylint: disable=unused-import

import shutil
import tempfile
import unittest

from unittest import mock

from ..core.config import Config
from ..core.store import MemoryStateStore

patch = mock.patch

class FakeClock(object):
   """Time source advancing only when slept on

   Callbacks registered with at() run as soon as the clock reaches their
   time, which lets a test play the part of a peer writing to the store.
   """
   def __init__(self, now=0.):
      self.now = now
      self.sleeps = 0
      self.events = []

   def __call__(self):
      return self.now

   def at(self, when, callback):
      self.events.append((when, callback))
      self.events.sort(key=lambda event: event[0])

   def sleep(self, delay):
      self.sleeps += 1
      self.now += delay
      while self.events and self.events[0][0] <= self.now + 1e-9:
         _, callback = self.events.pop(0)
         callback()

class StoreTestCase(unittest.TestCase):
   def setUp(self):
      self.tmpdir = tempfile.mkdtemp(prefix='unittest-warmreboot-')
      Config.reset()
      self.config = Config()
      self.config.warm_dir = self.tmpdir + '/warmboot'
      self.config.simulation_store = self.tmpdir + '/store.json'
      self.store = MemoryStateStore(self.config.simulation_store)

   def tearDown(self):
      Config.reset()
      shutil.rmtree(self.tmpdir, ignore_errors=True)
