"""
Git client infrastructure for decktool.

Wraps the clone, fetch, checkout, reset and sparse-checkout invocations
that repository sync needs. Tests patch this client instead of git.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from ..utils import run_command

logger = logging.getLogger(__name__)


class GitClient:
    """
    Runs git against repository checkouts.

    Every method raises CommandFailedError if git exits non-zero; git's own
    output streams straight to the terminal.

    Example:
        client = GitClient()
        client.clone("https://github.com/ajstarks/deckviz.git", "/tmp/deckviz", branch="master")
    """

    def __init__(self, git_cmd: str = "git"):
        """
        Initialize GitClient.

        Args:
            git_cmd: git executable (honours the GIT override)
        """
        self.git_cmd = git_cmd

    def _run(self, args: Sequence[str], context: Optional[str] = None) -> None:
        run_command([self.git_cmd, *args], context=context or f"git {args[0]}")

    @staticmethod
    def _depth_args(depth: int) -> List[str]:
        return [f"--depth={depth}"] if depth > 0 else []

    def is_git_repo(self, path: str) -> bool:
        """True when path holds a .git entry."""
        return (Path(path) / ".git").exists()

    def clone(
        self,
        url: str,
        path: str,
        branch: str,
        depth: int = 1,
        extra_args: Sequence[str] = (),
    ) -> None:
        """Shallow-clone ``url`` at ``branch`` into ``path``."""
        args = ["clone", *self._depth_args(depth), *extra_args, "--branch", branch, url, str(path)]
        self._run(args, context=f"git clone {url}")

    def fetch(
        self,
        path: str,
        branch: str,
        remote: str = "origin",
        depth: int = 1,
        extra_args: Sequence[str] = (),
    ) -> None:
        """Fetch ``branch`` from ``remote``."""
        args = ["-C", str(path), "fetch", *self._depth_args(depth), *extra_args, remote, branch]
        self._run(args, context=f"git fetch in {path}")

    def checkout(self, path: str, branch: str) -> None:
        self._run(["-C", str(path), "checkout", branch], context=f"git checkout {branch} in {path}")

    def reset_hard(self, path: str, ref: str) -> None:
        """Discard local changes and move to ``ref``."""
        self._run(["-C", str(path), "reset", "--hard", ref], context=f"git reset to {ref} in {path}")

    def sparse_checkout_init(self, path: str) -> None:
        self._run(["-C", str(path), "sparse-checkout", "init", "--cone"],
                  context=f"git sparse-checkout init in {path}")

    def sparse_checkout_set(self, path: str, paths: Sequence[str]) -> None:
        self._run(["-C", str(path), "sparse-checkout", "set", *paths],
                  context=f"git sparse-checkout set in {path}")
