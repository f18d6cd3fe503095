"""
Infrastructure layer for decktool.

Contains abstractions for external systems:
- GitClient: Git command execution
- GoToolchain: go build invocations
- ReleaseClient: GitHub releases through the gh CLI

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient
from .go_toolchain import GoToolchain
from .release_client import ReleaseClient

__all__ = [
    'GitClient',
    'GoToolchain',
    'ReleaseClient',
]
