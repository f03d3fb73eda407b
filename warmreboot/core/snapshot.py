"""
Capture of the forwarding state restored by the next boot.

The live store is first trimmed down to the tables the next boot replays,
then the whole store is saved and the resulting file moved to the warmboot
directory where the boot time restore logic looks for it.
"""

import os
import shutil

from ..libs.fs import mkdirs, moveAside, rmfile
from .exception import SnapshotError, StoreError
from .log import getLogger
from .store import (
   APPL_DB,
   ASIC_DB,
   COUNTERS_DB,
   FLEX_COUNTER_DB,
   STATE_DB,
   namespaceName,
)

logging = getLogger(__name__)

# only the route table and the warm restart records survive a fast-fast
# reboot, the asic and counters databases are rebuilt from scratch
FASTFAST_KEEP = {
   APPL_DB: frozenset([
      'ROUTE_TABLE:',
      'WARM_RESTART_TABLE|',
      'WARM_RESTART_ENABLE_TABLE|',
   ]),
}
FASTFAST_FLUSH = [ASIC_DB, COUNTERS_DB, FLEX_COUNTER_DB]

WARM_KEEP = {
   STATE_DB: frozenset([
      'FDB_TABLE|',
      'WARM_RESTART_TABLE|',
      'WARM_RESTART_ENABLE_TABLE|',
   ]),
}
WARM_FLUSH = []

class SnapshotProfile(object):
   def __init__(self, name, keep, flush):
      self.name = name
      self.keep = keep
      self.flush = flush

   def __str__(self):
      return 'SnapshotProfile(%s)' % self.name

fastfastProfile = SnapshotProfile('fastfast', FASTFAST_KEEP, FASTFAST_FLUSH)
warmProfile = SnapshotProfile('warm', WARM_KEEP, WARM_FLUSH)

class SnapshotManager(object):
   def __init__(self, store):
      self.store = store

   def filterNamespace(self, ns, keepPrefixes):
      logging.debug('filtering %s, keeping %s', namespaceName(ns),
                    ', '.join(sorted(keepPrefixes)))
      try:
         return self.store.namespace(ns).filter(keepPrefixes)
      except StoreError as e:
         raise SnapshotError('cannot filter %s: %s' % (namespaceName(ns), e.msg))

   def flushNamespace(self, ns):
      logging.debug('flushing %s', namespaceName(ns))
      try:
         self.store.namespace(ns).drop()
      except StoreError as e:
         raise SnapshotError('cannot flush %s: %s' % (namespaceName(ns), e.msg))

   def dump(self, destinationPath):
      try:
         source = self.store.flushToDisk()
      except StoreError as e:
         raise SnapshotError('cannot save the store: %s' % e.msg)

      logging.debug('relocating %s to %s', source, destinationPath)
      tmpPath = '%s.tmp' % destinationPath
      try:
         try:
            mkdirs(os.path.dirname(destinationPath))
            shutil.copyfile(source, tmpPath)
            os.replace(tmpPath, destinationPath)
         except (IOError, OSError) as e:
            raise SnapshotError('cannot relocate %s to %s: %s' %
                                (source, destinationPath, e))
      finally:
         # only present if the rename did not happen
         rmfile(tmpPath)

      try:
         rmfile(source, raises=True)
      except (IOError, OSError) as e:
         # the store would reload this file on its next start
         logging.error('failed to remove %s: %s', source, e)

      return destinationPath

   def capture(self, profile, destinationPath):
      logging.info('capturing %s snapshot to %s', profile.name, destinationPath)
      for ns, keepPrefixes in sorted(profile.keep.items()):
         self.filterNamespace(ns, keepPrefixes)
      for ns in profile.flush:
         self.flushNamespace(ns)
      return self.dump(destinationPath)

   @staticmethod
   def setAside(path, suffix=None):
      target = moveAside(path, suffix)
      if target:
         logging.info('previous snapshot moved to %s', target)
      return target
