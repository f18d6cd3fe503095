"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
import sys
from functools import wraps
from typing import Any, Generator

import click

from .exit_codes import (
    INTERRUPTED,
    get_exit_code_for_exception, CommandError
)

logger = logging.getLogger("decktool")


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - `Error: <message>` on stderr for any failure
    - Exit code from the CommandError, 1 for anything unexpected
    - Exit code 130 on Ctrl+C
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            # Click handles its own exit codes
            raise
        except CommandError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(e.exit_code)
        except Exception as e:
            logger.debug("Unhandled exception", exc_info=True)
            click.echo(f"Error: {e}", err=True)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def echo_progress(steps: Generator[str, None, Any], err: bool = False) -> Any:
    """
    Echo every progress message a service generator yields.

    Returns:
        The generator's return value
    """
    while True:
        try:
            message = next(steps)
        except StopIteration as stop:
            return stop.value
        click.echo(message, err=err)


# Standard options that several commands share
common_options = {
    'pretty': click.option('--pretty', is_flag=True,
                           help='Display as a formatted table'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('pretty')
        def my_command(pretty):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
