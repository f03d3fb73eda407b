#!/usr/bin/env python

import os

from setuptools import setup, find_packages

package_exclude = [
   "*.tests",
   "*.tests.*",
   "tests.*",
   "tests",
]

setup(
   name='sonic-warm-reboot',
   version='%s' % os.environ.get('SONIC_WARM_REBOOT_VERSION', '1.0'),
   description='Warm and fast reboot handoff for SONiC switches',
   python_requires='>=3.6',
   install_requires=['pyyaml', 'redis'],
   extras_require={
      'test': ['pytest'],
   },
   packages=find_packages(exclude=package_exclude),
   test_suite='warmreboot',
   entry_points={
      'console_scripts': [
         'warmreboot = warmreboot.cli:cliMain',
         'warm-reboot = warmreboot.cli:rebootMain',
         'fast-reboot = warmreboot.cli:rebootMain',
         'fastfast-reboot = warmreboot.cli:rebootMain',
      ],
   },
)
