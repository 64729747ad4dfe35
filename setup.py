from setuptools import setup, find_packages
from agingsched import __version__
from codecs import open
from os import path

here = path.abspath(path.dirname(__file__))
package_name = 'agingsched'
with open(path.join(here, 'README.rst'), encoding='utf-8') as f:
    long_description = f.read()
    
setup(
    name=package_name,
    version=__version__,
    description='Priority aging and dispatch ordering for cloudlet batches',
    long_description=long_description,
    author='Cristian Galleguillos',
    author_email='cristian.galleguillos.m@mail.pucv.cl',
    license='MIT',

    # See https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
    ],

    keywords='research, cloud, scheduling, aging, dispatching',
    python_requires='>=3.6',

    packages=find_packages(exclude=['contrib', 'docs', 'tests']),

    install_requires=['sortedcontainers', 'psutil'],
    extras_require={
        'test': ['pytest'],
    },
)
