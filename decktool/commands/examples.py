"""
Examples command for decktool.
"""

import click

from ..cli_utils import add_common_options, echo_progress, standard_command
from ..config import resolve_config
from ..render import render_examples_table
from ..services.example_service import ExampleService
from ..services.repo_sync_service import RepoSyncService


@click.command("examples")
@add_common_options('pretty')
@standard_command
def examples_handler(pretty):
    """List available examples as SOURCE/NAME.

    Syncs the data repositories first.

    \b
    Examples:
        decktool examples
        decktool examples --pretty
    """
    config = resolve_config(resolve_bin_dir=False)
    echo_progress(RepoSyncService(config).sync("data"))

    service = ExampleService(config)
    if pretty:
        render_examples_table(service.examples_by_source())
        return

    for example in service.list_examples():
        click.echo(example)
