from . import registerParser

@registerParser('clean',
                help='cancel a warm reboot that did not complete',
                description='''
Disable the warm restart flags, unload a kernel queued by kexec and move an
existing snapshot aside, as done when a warm reboot fails.
''')
def cleanParser(parser):
   parser.add_argument('-k', '--keep-kernel', action='store_true',
      help='do not unload the kexec kernel')
