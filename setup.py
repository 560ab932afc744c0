# -*- coding: utf-8 -*-
from setuptools import setup

from crosschain import VERSION

setup(name="crosschain",
      version=VERSION,
      description="Twisted-style chained Deferreds for callback-driven event loops",
      packages=['crosschain',
                'crosschain.stack',
                'crosschain.twisted_stack',
                'crosschain.tornado_stack',
                'crosschain.simple_stack'],
      python_requires='>=3.8',
      install_requires=['twisted', 'tornado'],
      extras_require={'test': ['pytest']},
      license='MIT'
      )
