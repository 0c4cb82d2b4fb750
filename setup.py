#!/usr/bin/env python

import os

from setuptools import setup


def get_version():
    """Read __version__ from rtinterp/version.py without importing the package
    """
    with open(os.path.abspath('rtinterp/version.py')) as f:
        version_lines = list(filter(lambda x: x.startswith('__version__'), f))
    assert (len(version_lines) == 1)
    return version_lines[0].split('=')[1].strip(" '\"\t\n")


DISTNAME = 'rtinterp'
# VERSION needs to be modified under rtinterp/version.py
VERSION = get_version()
DESCRIPTION = 'Real-time interpolation of sparse source estimates across cortical surfaces'
with open('README.md') as f:
    LONG_DESCRIPTION = f.read()
LICENSE = '2-clause BSD license'
with open('requirements.txt') as f:
    INSTALL_REQUIRES = f.read().split()


setup(name=DISTNAME,
      version=VERSION,
      description=DESCRIPTION,
      long_description=LONG_DESCRIPTION,
      long_description_content_type='text/markdown',
      license=LICENSE,
      packages=[
          'rtinterp',
          'rtinterp.polyutils',
          'rtinterp.tests',
      ],
      package_data={
            'rtinterp': [
                'defaults.cfg',
            ]
            },
      install_requires=INSTALL_REQUIRES,
      extras_require=dict(test=['pytest']),
      python_requires='>=3.7',
      include_package_data=True,
      classifiers=[
          'Development Status :: 4 - Beta',
          'Intended Audience :: Science/Research',
          'License :: OSI Approved :: BSD License',
          'Operating System :: OS Independent',
          'Programming Language :: Python',
          'Programming Language :: Python :: Implementation :: CPython',
          'Topic :: Scientific/Engineering :: Visualization'
      ]
)
