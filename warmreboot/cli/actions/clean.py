from . import registerAction
from ..args.clean import cleanParser
from ...core.flags import WarmRestartFlags
from ...core.guard import bestEffort
from ...core.log import getLogger
from ...core.peers import Kexec
from ...core.snapshot import SnapshotManager

logging = getLogger(__name__)

@registerAction(cleanParser)
def doClean(ctx, args):
   flags = WarmRestartFlags(ctx.store)

   def disableFlags():
      for component, value in flags.status().items():
         if value == 'true':
            flags.disable(component)

   steps = [disableFlags]
   if not args.keep_kernel:
      steps.append(Kexec(timeout=ctx.config.peer_timeout).unload)
   steps.append(lambda: SnapshotManager.setAside(ctx.config.snapshot_path))

   failed = bestEffort(*steps)
   if failed:
      logging.warning('%d cleanup step(s) failed', failed)
      return 1
   return 0
