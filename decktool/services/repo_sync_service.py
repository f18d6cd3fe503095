"""
Repository synchronization service for decktool.

Clones or fast-forwards the configured data and code repositories.
Used by `ensure`, `examples`, `run`, `view` and `dev-build`.
"""

import logging
from typing import Generator, List, Optional

from ..config import DeckConfig
from ..domain.repository import RepositorySpec
from ..infra.git_client import GitClient

logger = logging.getLogger(__name__)

SYNC_KINDS = ("data", "code", "all")


class RepoSyncService:
    """
    Service that keeps local clones at their configured branch tip.

    Repositories are processed one at a time in declaration order; the
    first git failure aborts the whole sync.

    Example:
        service = RepoSyncService(config)
        for progress in service.sync("data"):
            print(progress)

        synced = service.last_result
    """

    def __init__(self, config: DeckConfig, git_client: Optional[GitClient] = None):
        self.config = config
        self.git = git_client or GitClient(config.git_cmd)
        self.last_result: List[RepositorySpec] = []

    def select(self, kind: str = "all") -> List[RepositorySpec]:
        """Repositories of the given kind: "data", "code" or "all"."""
        if kind not in SYNC_KINDS:
            raise ValueError(f"unknown repository kind {kind!r}")
        repos = list(self.config.repos.values())
        if kind == "data":
            return [r for r in repos if r.is_data]
        if kind == "code":
            return [r for r in repos if not r.is_data]
        return repos

    def sync(self, kind: str = "all") -> Generator[str, None, List[RepositorySpec]]:
        """
        Clone or update every repository of ``kind``.

        Yields:
            Progress messages

        Returns:
            The synchronized repositories
        """
        synced: List[RepositorySpec] = []
        self.last_result = synced

        for repo in self.select(kind):
            if self.git.is_git_repo(repo.directory):
                yield f"Updating {repo.directory}"
                self.update(repo)
            else:
                yield f"Cloning {repo.url} into {repo.directory}"
                self.clone(repo)
            synced.append(repo)

        return synced

    def clone(self, repo: RepositorySpec) -> None:
        """Fresh shallow clone, then sparse checkout if configured."""
        repo.path.parent.mkdir(parents=True, exist_ok=True)
        self.git.clone(repo.url, repo.directory, repo.branch, depth=repo.depth, extra_args=repo.filter)

        if repo.sparse:
            self.git.sparse_checkout_init(repo.directory)
            self.git.sparse_checkout_set(repo.directory, repo.sparse)

    def update(self, repo: RepositorySpec) -> None:
        """Fetch, then hard-reset to the remote branch tip (local changes are discarded)."""
        self.git.fetch(repo.directory, repo.branch, depth=repo.depth, extra_args=repo.filter)
        self.git.checkout(repo.directory, repo.branch)
        self.git.reset_hard(repo.directory, f"origin/{repo.branch}")

        if repo.sparse:
            self.git.sparse_checkout_set(repo.directory, repo.sparse)
