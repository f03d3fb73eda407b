import os

from . import registerAction
from ..args.status import statusParser
from ...core.flags import WarmRestartFlags
from ...core.handshake import HandshakeProtocol

@registerAction(statusParser, needsRoot=False)
def doStatus(ctx, args):
   handshake = HandshakeProtocol(ctx.store)
   for component in args.component or [ctx.config.sync_agent_record]:
      print('%s' % handshake.read(component))

   flags = WarmRestartFlags(ctx.store).status()
   if not flags:
      print('No warm restart flag set')
   for component, value in sorted(flags.items()):
      print('warm restart %s: %s' % (component, value))

   path = ctx.config.snapshot_path
   print('snapshot %s: %s' % (path, 'present' if os.path.exists(path)
                                     else 'absent'))
