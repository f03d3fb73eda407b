import subprocess

from ...tests.testing import patch, unittest
from .. import utils
from ..exception import PeerError
from ..peers import (
   DOCKER,
   KEXEC,
   ORCHAGENT_RESTART_CHECK,
   SYNCD_REQUEST_SHUTDOWN,
   FreezeProbe,
   Kexec,
   SyncAgent,
   runCommand,
)

def completed(returncode):
   return subprocess.CompletedProcess([], returncode, stdout=None,
                                      stderr=b'error')

class PeersTest(unittest.TestCase):
   def setUp(self):
      self.simulation = utils.inSimulation()
      utils.setSimulation(False)
      self.runPatch = patch('subprocess.run', return_value=completed(0))
      self.run = self.runPatch.start()

   def tearDown(self):
      self.runPatch.stop()
      utils.setSimulation(self.simulation)

   def _commands(self):
      return [call[0][0] for call in self.run.call_args_list]

   def testSimulation(self):
      utils.setSimulation(True)
      self.assertEqual(runCommand([KEXEC, '--exec']), 0)
      self.run.assert_not_called()

   def testRequestPreShutdown(self):
      SyncAgent('syncd').requestPreShutdown()
      self.assertEqual(self._commands(), [
         [DOCKER, 'exec', '-i', 'syncd', SYNCD_REQUEST_SHUTDOWN, '--pre'],
      ])

   def testRequestPreShutdownFailureIsIgnored(self):
      self.run.return_value = completed(1)
      SyncAgent('syncd').requestPreShutdown()
      self.run.side_effect = OSError('docker: not found')
      SyncAgent('syncd').requestPreShutdown()
      self.run.side_effect = subprocess.TimeoutExpired('docker', 10)
      SyncAgent('syncd').requestPreShutdown()
      self.assertEqual(self.run.call_count, 3)

   def testFreezeProbeRetries(self):
      self.run.side_effect = [completed(1), completed(1), completed(0)]
      probe = FreezeProbe('swss', retries=5, timeout=3, waitMs=1000)
      self.assertTrue(probe.probe())
      self.assertEqual(probe.attempts, 3)
      self.assertEqual(self._commands()[0], [
         DOCKER, 'exec', '-i', 'swss', ORCHAGENT_RESTART_CHECK,
         '-w', '1000', '-r', '1',
      ])
      for call in self.run.call_args_list:
         self.assertEqual(call[1]['timeout'], 3)

   def testFreezeProbeExhausted(self):
      self.run.side_effect = subprocess.TimeoutExpired('docker', 10)
      probe = FreezeProbe('swss', retries=4)
      self.assertFalse(probe.probe())
      self.assertEqual(probe.attempts, 4)
      self.assertEqual(self.run.call_count, 4)

   def testFreezeProbeRunsAtLeastOnce(self):
      self.run.return_value = completed(1)
      probe = FreezeProbe('swss', retries=0)
      self.assertFalse(probe.probe())
      self.assertEqual(probe.attempts, 1)
      self.assertEqual(self.run.call_count, 1)

   def testKexecLoad(self):
      kernel = Kexec(image='/host/image-2/boot/vmlinuz',
                     initrd='/host/image-2/boot/initrd.img',
                     append='console=ttyS0 SONIC_BOOT_TYPE=warm')
      kernel.load()
      self.assertTrue(kernel.loaded)
      self.assertEqual(self._commands(), [[
         KEXEC, '--load', '/host/image-2/boot/vmlinuz',
         '--initrd=/host/image-2/boot/initrd.img',
         '--append=console=ttyS0 SONIC_BOOT_TYPE=warm',
      ]])
      kernel.execute()
      self.assertEqual(self._commands()[-1], [KEXEC, '--exec'])

   def testKexecFailures(self):
      with self.assertRaises(PeerError):
         Kexec().load()
      with self.assertRaises(PeerError):
         Kexec(image='vmlinuz').execute()
      self.run.return_value = completed(1)
      with self.assertRaises(PeerError):
         Kexec(image='vmlinuz').load()
      with self.assertRaises(PeerError):
         Kexec().unload()

   def testKexecUnload(self):
      kernel = Kexec(image='vmlinuz')
      kernel.load()
      kernel.unload()
      self.assertFalse(kernel.loaded)
      self.assertEqual(self._commands()[-1], [KEXEC, '--unload'])

if __name__ == '__main__':
   unittest.main()
