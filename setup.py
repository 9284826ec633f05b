# Copyright 2022-2024 MosaicML Streaming authors
# SPDX-License-Identifier: Apache-2.0

"""slabloader package setup."""

import os

import setuptools
from setuptools import setup

# Read the slabloader version
# Cannot import from `slabloader.__version__` since that will not be available when building or installing the package
with open(os.path.join(os.path.dirname(__file__), 'slabloader', '_version.py')) as f:
    version_globals = {}
    version_locals = {}
    exec(f.read(), version_globals, version_locals)
    slabloader_version = version_locals['__version__']

# Use repo README for PyPi description
with open('README.md', 'r', encoding='utf-8') as fh:
    long_description = fh.read()

classifiers = [
    'Programming Language :: Python :: 3',
    'Programming Language :: Python :: 3.9',
    'Programming Language :: Python :: 3.10',
    'Programming Language :: Python :: 3.11',
    'Programming Language :: Python :: 3.12',
]

install_requires = [
    'h5py>=3.6,<4',
    'numpy>=1.21,<3',
    'torch>=1.10,<3',
    'tqdm>=4.64.0,<5',
    'typing_extensions>=4.0',
]

extra_deps = {}

extra_deps['dev'] = [
    'pre-commit>=2.18.1,<4',
    'pytest>=8,<9',
    'pytest-cov>=4,<6',
]

extra_deps['mpi'] = [
    'mpi4py>=3.1,<5',
]

extra_deps['all'] = sorted({dep for deps in extra_deps.values() for dep in deps})

setup(
    name='slabloader',
    version=slabloader_version,
    description=
    'Distributed epoch-based batch sampling and reading of large multidimensional HDF5 arrays',
    long_description=long_description,
    long_description_content_type='text/markdown',
    include_package_data=True,
    packages=setuptools.find_packages(exclude=['tests*']),
    entry_points={
        'console_scripts': [
            'slabloader-read = slabloader.cli.read:run',
            'slabloader-create = slabloader.cli.create:run',
        ],
    },
    classifiers=classifiers,
    install_requires=install_requires,
    extras_require=extra_deps,
    python_requires='>=3.9',
)
