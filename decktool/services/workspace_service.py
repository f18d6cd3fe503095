"""
Go workspace writer for decktool.

Writes ``go.work`` in the source cache so a single ``go build`` resolves
imports across every cloned code repository, plus the base directory
when it is itself a Go module.
"""

import logging
import os
from pathlib import Path
from typing import List

from ..config import DeckConfig

logger = logging.getLogger(__name__)

WORKSPACE_FILE = "go.work"


class WorkspaceService:
    """Generates the workspace descriptor; always overwrites, never patches."""

    def __init__(self, config: DeckConfig):
        self.config = config

    @property
    def path(self) -> Path:
        return self.config.src_dir / WORKSPACE_FILE

    def _use_entry(self, directory: Path) -> str:
        rel = os.path.relpath(directory, self.config.src_dir)
        rel = Path(rel).as_posix()
        if not rel.startswith("."):
            rel = f"./{rel}"
        return rel

    def members(self) -> List[str]:
        """Directories joined into the workspace, relative to the source cache.

        The base directory only joins when it holds a go.mod.
        """
        entries = []
        if (self.config.base_dir / "go.mod").is_file():
            entries.append(self._use_entry(self.config.base_dir))
        for repo in self.config.code_repos():
            entries.append(self._use_entry(repo.path))
        return entries

    def render(self) -> str:
        lines = [f"go {self.config.go_version}", ""]
        lines.extend(f"use {entry}" for entry in self.members())
        return "\n".join(lines) + "\n"

    def write(self) -> Path:
        self.config.src_dir.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.render())
        logger.debug(f"Wrote {self.path}")
        return self.path
