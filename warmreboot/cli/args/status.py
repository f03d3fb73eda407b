from . import registerParser

@registerParser('status',
                help='show the warm restart state of the system')
def statusParser(parser):
   parser.add_argument('-c', '--component', action='append',
      help='handoff record to display, default the sync agent')
