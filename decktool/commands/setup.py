"""
Setup command for decktool.

Installs decktool itself and writes shell completions.
"""

import click

from ..cli_utils import echo_progress, standard_command
from ..config import resolve_config
from ..exit_codes import CommandError
from ..services.setup_service import SetupService, completion_script, detect_shell
from .ensure import ensure_tooling


@click.command("setup")
@click.option("--install/--no-install", default=None,
              help="pip install decktool (default on, off with --local)")
@click.option("--completions", "shell", default=detect_shell,
              help="Generate completions for shell (bash|zsh|fish)")
@click.option("--output", default="", help="Write completions to file (default auto path)")
@click.option("--sync", is_flag=True, help="Sync repositories and tooling before installing")
@click.option("--local", default="", help="e.g. --local=bin/decktool to place a launcher in the repo")
@click.pass_context
@standard_command
def setup_handler(ctx, install, shell, output, sync, local):
    """Install decktool and optionally emit shell completions.

    \b
    Examples:
        decktool setup
        decktool setup --local bin/decktool --completions zsh
        decktool setup --no-install --completions fish
    """
    if install is None:
        install = not local

    config = resolve_config(resolve_bin_dir=False)
    if sync:
        ensure_tooling(config)

    service = SetupService(config)
    launcher = echo_progress(service.build_self(local))
    if install:
        echo_progress(service.install_self(launcher, local))

    if shell:
        script = completion_script(ctx.find_root().command, shell)
        written = echo_progress(service.write_completion(script, shell, output))
        if written is None:
            click.echo(script, nl=False)
    elif not install and launcher is None:
        raise CommandError("nothing to do: specify --install or --completions")
