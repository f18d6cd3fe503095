"""
Self-installation and shell completion for decktool.

Used by `setup` and `completion`.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Generator, Optional

import click
from click.shell_completion import get_completion_class

from ..config import DeckConfig, expand_path
from ..exit_codes import CommandError, ConfigError
from ..utils import run_command

logger = logging.getLogger(__name__)

PROG_NAME = "decktool"
COMPLETE_VAR = "_DECKTOOL_COMPLETE"
SUPPORTED_SHELLS = ("bash", "zsh", "fish")

LAUNCHER_TEMPLATE = """#!/bin/sh
exec "{python}" -m decktool "$@"
"""


def detect_shell() -> str:
    """Basename of $SHELL, or empty when unset."""
    shell = os.environ.get("SHELL", "").strip()
    return Path(shell).name if shell else ""


def completion_script(command: click.Command, shell: str) -> str:
    """Completion script for ``shell`` generated from the click command tree."""
    comp_cls = get_completion_class(shell)
    if comp_cls is None:
        raise CommandError(f"unsupported shell {shell!r} (choose from {', '.join(SUPPORTED_SHELLS)})")
    return comp_cls(command, {}, PROG_NAME, COMPLETE_VAR).source()


def completion_path(home: Path, shell: str) -> Optional[Path]:
    """Default location of the completion script for ``shell``."""
    if shell == "zsh":
        return home / ".decktool" / "completions" / "_decktool"
    if shell == "bash":
        return home / ".decktool" / "completions" / "decktool.bash"
    if shell == "fish":
        return home / ".config" / "fish" / "completions" / "decktool.fish"
    return None


def rc_path(home: Path, shell: str) -> Optional[Path]:
    if shell == "zsh":
        return home / ".zshrc"
    if shell == "bash":
        return home / ".bashrc"
    # fish loads ~/.config/fish/completions on its own
    return None


def rc_snippet(shell: str, script_path: Path) -> str:
    if shell == "zsh":
        return f'\n# decktool completions\nif [ -f "{script_path}" ]; then\n  source "{script_path}"\nfi\n'
    if shell == "bash":
        return f'\n# decktool completions\nif [ -f "{script_path}" ]; then\n  . "{script_path}"\nfi\n'
    return ""


def ensure_shell_snippet(rc: Path, snippet: str) -> bool:
    """Append ``snippet`` to ``rc`` unless already present. Returns True if written."""
    if rc.exists():
        if snippet in rc.read_text():
            return False
        with open(rc, "a") as f:
            f.write(snippet)
        return True
    rc.parent.mkdir(parents=True, exist_ok=True)
    rc.write_text(snippet)
    return True


class SetupService:
    """
    Installs decktool itself and writes completion scripts.

    ``--local PATH`` writes a launcher script that runs this interpreter
    with ``-m decktool``; otherwise the source checkout is pip-installed.
    """

    def __init__(self, config: DeckConfig, home: Optional[Path] = None,
                 python: Optional[str] = None):
        self.config = config
        self.home = home or Path.home()
        self.python = python or sys.executable

    def project_root(self) -> Path:
        root = Path(__file__).resolve().parents[2]
        if not (root / "pyproject.toml").is_file():
            raise ConfigError(f"no decktool source checkout found at {root}; install with pip instead")
        return root

    def build_self(self, local: Optional[str]) -> Generator[str, None, Optional[Path]]:
        """Write a local launcher when ``local`` is given; returns its path."""
        local = (local or "").strip()
        if not local:
            return None
        target = expand_path(local)
        target.parent.mkdir(parents=True, exist_ok=True)
        yield f"Building decktool to {target}"
        target.write_text(LAUNCHER_TEMPLATE.format(python=self.python))
        target.chmod(0o755)
        return target

    def install_self(self, built: Optional[Path], local: Optional[str]) -> Generator[str, None, None]:
        if (local or "").strip():
            yield f"Local decktool binary located at {built}"
            return
        root = self.project_root()
        yield f"Installing decktool from {root}"
        run_command([self.python, "-m", "pip", "install", str(root)], context="pip install decktool")

    def write_completion(self, script: str, shell: str,
                         output: Optional[str] = None) -> Generator[str, None, Optional[Path]]:
        """
        Write ``script`` to ``output`` (or the shell's default path) and
        source it from the shell rc file.

        Returns None when there is no destination; the caller prints the
        script to stdout instead.
        """
        output = (output or "").strip()
        if not output or output == "-":
            default = completion_path(self.home, shell)
            output = str(default) if default else ""
        if not output or output == "-":
            return None

        target = expand_path(output)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(script)
        yield f"Wrote {shell} completions to {target}"

        rc = rc_path(self.home, shell)
        snippet = rc_snippet(shell, target)
        if rc and snippet:
            try:
                if ensure_shell_snippet(rc, snippet):
                    yield f"Updated {rc} to source completion script."
            except OSError as e:
                logger.warning(f"unable to update {rc} automatically ({e})")
        return target
