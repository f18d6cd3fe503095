"""
Ensure command for decktool.

Downloads the latest released binaries and syncs the data repositories.
"""

import click

from ..cli_utils import echo_progress, standard_command
from ..config import resolve_config
from ..services.release_service import ReleaseService
from ..services.repo_sync_service import RepoSyncService


def ensure_tooling(config) -> None:
    """Fetch release binaries, then clone or update the data repositories."""
    echo_progress(ReleaseService(config).download_latest())
    echo_progress(RepoSyncService(config).sync("data"))


@click.command("ensure")
@standard_command
def ensure_handler():
    """Download released binaries and sync data repositories."""
    config = resolve_config()
    ensure_tooling(config)
    click.echo("Tooling and repositories are up to date.")
