"""
Completion command for decktool.
"""

import click

from ..cli_utils import standard_command
from ..services.setup_service import SUPPORTED_SHELLS, completion_script


@click.command("completion")
@click.argument("shell", type=click.Choice(SUPPORTED_SHELLS))
@click.pass_context
@standard_command
def completion_handler(ctx, shell):
    """Generate a shell completion script.

    \b
    Examples:
        decktool completion zsh > ~/.decktool/completions/_decktool
        eval "$(decktool completion bash)"
    """
    click.echo(completion_script(ctx.find_root().command, shell), nl=False)
