"""
Service layer for decktool.

Contains the workflows that commands compose:
- RepoSyncService: Clone or update data and code repositories
- WorkspaceService: Write the go.work descriptor
- BuildService: Build binaries across native, WASM and WASI targets
- ReleaseService: Fetch and publish GitHub release binaries
- ExampleService: Lint, render and view examples
- SetupService: Self-install and shell completion

Long-running operations are generators that yield progress messages and
keep their outcome on the service (``last_result`` and friends).
"""

from .repo_sync_service import RepoSyncService
from .workspace_service import WorkspaceService
from .build_service import BuildService, BuildSummary
from .release_service import ReleaseService
from .example_service import ExampleService
from .setup_service import SetupService

__all__ = [
    'RepoSyncService',
    'WorkspaceService',
    'BuildService',
    'BuildSummary',
    'ReleaseService',
    'ExampleService',
    'SetupService',
]
