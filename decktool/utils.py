"""
Shared utility functions for decktool.
"""
import os
import shlex
import subprocess
from pathlib import Path
from typing import IO, Dict, List, Optional, Sequence, Tuple

from .config import logger
from .exit_codes import CommandFailedError, DependencyError


def command_string(command: Sequence[str]) -> str:
    return ' '.join(shlex.quote(str(part)) for part in command)


def child_environment(overlay: Optional[Dict[str, str]] = None) -> Optional[Dict[str, str]]:
    """Inherited environment with ``overlay`` layered on top (None = inherit as-is)."""
    if not overlay:
        return None
    env = os.environ.copy()
    env.update(overlay)
    return env


def run_command(
    command: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Dict[str, str]] = None,
    capture_output: bool = False,
    stdout: Optional[IO] = None,
    interactive: bool = False,
    quiet: bool = False,
    check: bool = True,
    context: Optional[str] = None,
) -> Tuple[Optional[str], int]:
    """
    Runs an external command, one at a time, and waits for it to exit.

    Args:
        command: Argument list (never passed through a shell).
        cwd: The working directory (default: current directory).
        env: Variables layered onto the inherited environment for this child only.
        capture_output: If True, return stdout as a string instead of streaming it.
        stdout: File object that receives the child's stdout.
        interactive: Connect the child to the terminal's stdin.
        quiet: Discard the child's output entirely.
        check: If True, raise CommandFailedError on non-zero exit codes.
        context: Short description used in the error message.

    Returns:
        tuple: (stdout_str, returncode) if capture_output is True, otherwise (None, returncode).
    """
    command = [str(part) for part in command]
    cmd_str = command_string(command)
    logger.debug(f"Running command in '{cwd or os.getcwd()}': {cmd_str}")

    if capture_output:
        out = subprocess.PIPE
    elif quiet:
        out = subprocess.DEVNULL
    else:
        out = stdout

    if cwd and not Path(cwd).is_dir():
        raise CommandFailedError(
            f"{context or cmd_str} failed: working directory {cwd} does not exist",
            command=command,
        )

    try:
        result = subprocess.run(
            command,
            cwd=str(cwd) if cwd else None,
            env=child_environment(env),
            stdin=None if interactive else subprocess.DEVNULL,
            stdout=out,
            stderr=subprocess.DEVNULL if quiet else None,
            text=True,
            check=False,  # Disable check here to handle the exit status manually
        )
    except FileNotFoundError as e:
        raise DependencyError(command[0], f"Make sure '{command[0]}' is installed and on PATH") from e

    if result.returncode != 0 and check:
        what = context or cmd_str
        raise CommandFailedError(
            f"{what} failed: exit status {result.returncode}",
            command=command,
            returncode=result.returncode,
        )

    if capture_output:
        return (result.stdout or "").strip(), result.returncode
    return None, result.returncode


def list_subdirectories(root: Path) -> List[str]:
    """Sorted names of non-hidden subdirectories (empty if root is missing)."""
    try:
        entries = list(Path(root).iterdir())
    except OSError:
        return []
    return sorted(
        entry.name for entry in entries
        if entry.is_dir() and not entry.name.startswith('.')
    )
