import time

from . import registerAction
from ..args.reboot import rebootParser
from ...core.log import getLogger
from ...core.peers import FreezeProbe, Kexec, SyncAgent
from ...core.platform import getAsicType
from ...core.reboot import RebootOrchestrator

logging = getLogger(__name__)

@registerAction(rebootParser)
def doReboot(ctx, args):
   config = ctx.config
   kernel = Kexec(image=args.kernel, initrd=args.initrd, append=args.append,
                  timeout=config.peer_timeout)
   syncAgent = SyncAgent(config.sync_agent, timeout=config.peer_timeout)
   freezeProbe = FreezeProbe(config.freeze_peer,
                             retries=config.freeze_retries,
                             timeout=config.freeze_timeout,
                             waitMs=config.freeze_wait_ms)

   orchestrator = RebootOrchestrator(ctx.store, config, kernel, syncAgent,
                                     freezeProbe, force=args.force)
   invocation = args.type or args.invocation
   asicType = args.asic_type or getAsicType()

   start = time.monotonic()
   rebootClass = orchestrator.run(invocation, asicType,
                                  execute=not args.dry_run)
   logging.info('%s prepared in %.1fs', rebootClass, time.monotonic() - start)
