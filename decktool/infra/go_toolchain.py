"""
Go toolchain wrapper for decktool.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from ..utils import run_command

logger = logging.getLogger(__name__)


class GoToolchain:
    """Runs ``go build`` with per-invocation environment overrides."""

    def __init__(self, go_cmd: str = "go"):
        self.go_cmd = go_cmd

    def build(
        self,
        package: str,
        output: Path,
        cwd: Path,
        env: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Build ``package`` into ``output``.

        Args:
            package: Go import path
            output: Absolute output file (cwd differs from the caller's)
            cwd: Directory holding the go.work workspace
            env: GOOS/GOARCH overrides layered onto the inherited environment
        """
        run_command(
            [self.go_cmd, "build", "-o", str(output), package],
            cwd=cwd,
            env=env,
            context=f"go build {package}",
        )
