"""
Domain layer for decktool.

Plain configuration records used by the services:
- RepositorySpec: A git repository to clone or update
- BinarySpec: A tool binary and the targets it supports
- BuildTarget / BuildResult: Build matrix entries and their outcomes
- ExampleRef: A (source, name) reference to an example directory
"""

from .repository import RepositorySpec
from .binary import BinarySpec, BuildTarget, BuildResult, build_filename, host_platform
from .example import ExampleRef

__all__ = [
    'RepositorySpec',
    'BinarySpec',
    'BuildTarget',
    'BuildResult',
    'build_filename',
    'host_platform',
    'ExampleRef',
]
