"""
Standard exit codes and error types for decktool commands.

decktool only distinguishes success from failure; Ctrl+C and usage errors
keep their conventional POSIX codes.
"""
from typing import List, Optional, Sequence

# Standard POSIX exit codes; click exits 2 on usage errors
GENERAL_ERROR = 1        # General errors
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, KeyboardInterrupt):
        return INTERRUPTED
    if isinstance(exc, CommandError):
        return exc.exit_code
    return GENERAL_ERROR


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class DependencyError(CommandError):
    """Raised when a required external tool is not installed."""
    def __init__(self, tool: str, hint: Optional[str] = None):
        message = f"{tool} not found"
        if hint:
            message += f". {hint}"
        super().__init__(message)
        self.tool = tool
        self.hint = hint


class CommandFailedError(CommandError):
    """Raised when an external process exits non-zero."""
    def __init__(self, message: str, command: Optional[Sequence[str]] = None,
                 returncode: Optional[int] = None):
        super().__init__(message)
        self.command: List[str] = list(command) if command else []
        self.returncode = returncode


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message)


class UnsupportedTargetError(CommandError):
    """A binary cannot be built for the requested target."""
    def __init__(self, message: str):
        super().__init__(message)
