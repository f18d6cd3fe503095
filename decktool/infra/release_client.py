"""
Release hosting client for decktool.

Wraps the GitHub ``gh`` CLI for listing, viewing, downloading and creating
releases. Authentication is whatever ``gh`` already holds.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from ..exit_codes import CommandFailedError, DependencyError
from ..utils import run_command

logger = logging.getLogger(__name__)

GH_INSTALL_HINT = (
    "Install it from https://cli.github.com/ "
    "(e.g. brew install gh, or go install github.com/cli/cli/v2/cmd/gh@latest)"
)


def parse_release_tag(listing: str) -> str:
    """
    Extract the tag of the first release in ``gh release list`` output.

    Lines are tab separated: TITLE, TYPE, TAG, DATE.
    """
    lines = [line for line in listing.strip().splitlines() if line.strip()]
    if not lines:
        raise CommandFailedError("no releases found")
    fields = lines[0].split("\t")
    if len(fields) < 3:
        raise CommandFailedError(f"failed to parse release info: {lines[0]!r}")
    return fields[2].strip()


def parse_release_time(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp; empty or ``null`` means unknown."""
    value = (value or "").strip()
    if not value or value == "null":
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError as e:
        raise CommandFailedError(f"failed to parse release time {value!r}: {e}") from e


class ReleaseClient:
    """
    Thin wrapper over ``gh release``.

    Example:
        client = ReleaseClient()
        client.require()
        tag = client.latest_release_tag()
        client.download(tag, "decksh-linux-amd64", Path(".dist"))
    """

    def __init__(self, gh_cmd: str = "gh"):
        self.gh_cmd = gh_cmd

    def is_available(self) -> bool:
        return shutil.which(self.gh_cmd) is not None

    def require(self) -> None:
        """Raise DependencyError if gh is not installed."""
        if not self.is_available():
            raise DependencyError(f"{self.gh_cmd} CLI", GH_INSTALL_HINT)

    def _output(self, args: Sequence[str], context: str) -> str:
        output, _ = run_command([self.gh_cmd, *args], capture_output=True, context=context)
        return output or ""

    def latest_release_tag(self) -> str:
        listing = self._output(["release", "list", "--limit", "1"], "listing releases")
        return parse_release_tag(listing)

    def release_created_at(self, tag: str) -> Optional[datetime]:
        """Creation time of ``tag`` (createdAt; publishedAt is null for drafts)."""
        value = self._output(
            ["release", "view", tag, "--json", "createdAt", "-q", ".createdAt"],
            f"reading release time of {tag}",
        )
        return parse_release_time(value)

    def download(self, tag: str, pattern: str, dest_dir: Path) -> None:
        run_command(
            [self.gh_cmd, "release", "download", tag, "-p", pattern, "-D", str(dest_dir), "--clobber"],
            context=f"downloading {pattern} from {tag}",
        )

    def is_authenticated(self) -> bool:
        _, code = run_command(
            [self.gh_cmd, "auth", "status"],
            quiet=True,
            check=False,
        )
        return code == 0

    def login(self) -> None:
        """Interactive ``gh auth login``."""
        try:
            run_command([self.gh_cmd, "auth", "login"], interactive=True, context="gh auth login")
        except CommandFailedError as e:
            raise CommandFailedError(f"authentication failed: {e}", e.command, e.returncode) from e

    def repo_name(self) -> str:
        return self._output(
            ["repo", "view", "--json", "nameWithOwner", "-q", ".nameWithOwner"],
            "reading repository info",
        )

    def create_release(
        self,
        version: str,
        files: List[Path],
        title: str,
        notes: str,
        prerelease: bool = False,
    ) -> None:
        args = [self.gh_cmd, "release", "create", version, "--title", title, "--notes", notes]
        if prerelease:
            args.append("--prerelease")
        args.extend(str(f) for f in files)
        run_command(args, context=f"creating release {version}")
