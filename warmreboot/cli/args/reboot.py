from . import registerParser

@registerParser('reboot',
                help='reboot the switch, preserving the forwarding state',
                description='''
Reboot the control plane with kexec. The reboot type is derived from the
program name (fast-reboot, warm-reboot or fastfast-reboot) unless --type is
given. Warm class reboots first quiesce the forwarding plane and capture a
snapshot of its state for the next boot to restore.
''')
def rebootParser(parser):
   parser.add_argument('-t', '--type', choices=[
         'fast-reboot', 'warm-reboot', 'fastfast-reboot'
      ], help='reboot type, overrides the program name')
   parser.add_argument('-f', '--force', action='store_true',
      help='ignore a failure to freeze orchagent')
   parser.add_argument('--asic-type',
      help='asic type, read from sonic_version.yml by default')
   parser.add_argument('--kernel',
      help='kernel image to load with kexec')
   parser.add_argument('--initrd',
      help='initrd to load along the kernel')
   parser.add_argument('--append', default='',
      help='kernel command line of the new kernel')
   parser.add_argument('--dry-run', action='store_true',
      help='prepare the reboot but do not execute the new kernel')
