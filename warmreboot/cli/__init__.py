import argparse
import os
import sys

from .args import getParsers
from .actions import CliContext, getAction

from ..core import utils
from ..core.config import Config
from ..core.exception import EXIT_FAILURE, RebootError
from ..core.log import LoggerError, getLogger, setupLogging
from ..core.store import getStateStore

logging = getLogger(__name__)

def checkRootPermissions():
   if utils.inSimulation():
      return True

   if os.geteuid() != 0:
      logging.error('You must be root to use this feature')
      return False
   return True

def setupSimulation():
   utils.setSimulation(True)
   assert utils.inSimulation()

   logging.info('Running in simulation mode')

def addCommonArgs(parser, default=None):
   parser.add_argument('-l', '--logfile', type=str, default=default,
                       help='log file to log to')
   parser.add_argument('-s', '--simulation', action='store_true',
                       default=default or False,
                       help='force simulation mode')
   parser.add_argument('--syslog', action='store_true',
                       default=default or False,
                       help='also send logs to syslog')
   parser.add_argument('-v', '--verbosity', type=str, default=default,
                       help='verbosity of the loggers, e.g. "core.*/DEBUG"')

def parseArgs(args, prog=None):
   parser = argparse.ArgumentParser(
      prog=os.path.basename(prog) if prog else None,
      description='SONiC warm and fast reboot tooling',
      formatter_class=argparse.ArgumentDefaultsHelpFormatter
   )
   addCommonArgs(parser)
   parser.set_defaults(invocation=prog)

   subparsers = parser.add_subparsers(dest='action')
   subparsers.add_parser('help', help='print a help message')
   for subparser in getParsers():
      sub = subparsers.add_parser(
         subparser.name,
         formatter_class=argparse.RawDescriptionHelpFormatter,
         **subparser.kwargs
      )
      # only set when given after the action name
      addCommonArgs(sub, default=argparse.SUPPRESS)
      subparser.func(sub)

   args = parser.parse_args(args)
   if args.action is None or args.action == 'help':
      parser.print_help()
      sys.exit(0)
   return args

def runAction(args):
   action = getAction(args.action)
   if action is None:
      logging.error("Command %s doesn't exists", args.action)
      return EXIT_FAILURE

   if action.needsRoot and not checkRootPermissions():
      return EXIT_FAILURE

   config = Config()
   ctx = CliContext(config=config,
                    store=getStateStore(config, simulation=utils.inSimulation()))

   try:
      ret = action.func(ctx, args)
   except RebootError as e:
      logging.error('%s', e)
      return e.code

   if ret is None or ret is True:
      return 0
   return int(ret)

def main(args=None, prog=None):
   args = parseArgs(args, prog)

   try:
      # syslog entries are tagged with the command that was run
      ident = os.path.basename(args.invocation) if args.invocation else None
      setupLogging(args.verbosity, args.logfile, args.syslog, ident=ident)
   except LoggerError as e:
      print(e, file=sys.stderr)
      return e.code

   if args.simulation:
      setupSimulation()

   logging.debug('%s', args)

   return runAction(args)

def rebootMain():
   '''Entry point of the fast-reboot, warm-reboot and fastfast-reboot commands'''
   sys.exit(main(['reboot'] + sys.argv[1:], prog=sys.argv[0]))

def cliMain():
   sys.exit(main(sys.argv[1:]))
