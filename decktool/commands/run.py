"""
Run and view commands for decktool.

Both lint and render examples; `view` then opens the result in the viewer.
"""

from typing import List

import click
from click.shell_completion import CompletionItem

from ..cli_utils import echo_progress, standard_command
from ..config import resolve_config
from ..exit_codes import CommandError
from ..services.example_service import ExampleService
from .ensure import ensure_tooling


def complete_example(ctx, param, incomplete) -> List[CompletionItem]:
    """Shell completion for example arguments."""
    try:
        config = resolve_config(resolve_bin_dir=False)
        candidates = ExampleService(config).complete(incomplete)
    except (CommandError, OSError):
        return []
    return [CompletionItem(c) for c in candidates]


@click.command("run")
@click.argument("examples", nargs=-1, required=True, shell_complete=complete_example)
@standard_command
def run_handler(examples):
    """Lint and render one or more examples.

    EXAMPLES are SOURCE/NAME references; a bare NAME uses the default
    source (deckviz).

    \b
    Examples:
        decktool run fire
        decktool run deckviz/fire dubois/plate01
    """
    config = resolve_config()
    ensure_tooling(config)

    service = ExampleService(config)
    results = echo_progress(service.run_examples(examples))
    for name in sorted(results):
        click.echo(f"{name} -> {results[name]}")


@click.command("view")
@click.argument("example", shell_complete=complete_example)
@standard_command
def view_handler(example):
    """Render an example and open it in the viewer (ebdeck)."""
    config = resolve_config()
    ensure_tooling(config)

    echo_progress(ExampleService(config).view(example))
