"""
Developer commands for decktool.

- dev-build: build every binary for native, WASM and WASI
- dev-release: publish the dist directory as a GitHub release
- dev-clean: remove the cache directories
"""

import shutil

import click

from ..cli_utils import add_common_options, echo_progress, standard_command
from ..config import resolve_config
from ..domain.binary import ALL_TARGETS
from ..exit_codes import CommandError
from ..render import render_build_results, render_build_table
from ..services.build_service import BuildService, BuildSummary
from ..services.release_service import ReleaseService
from ..services.repo_sync_service import RepoSyncService
from ..services.workspace_service import WorkspaceService


def build_everything(config) -> BuildSummary:
    """Sync code repositories, write go.work and run the build matrix."""
    click.echo("Syncing build repositories...")
    echo_progress(RepoSyncService(config).sync("code"))

    click.echo("Creating go.work workspace...")
    path = WorkspaceService(config).write()
    click.echo(f"✓ Created {path}")

    targets = ", ".join(str(t) for t in ALL_TARGETS)
    click.echo(f"Building {len(config.toolchain)} binaries for targets: {targets}")
    return echo_progress(BuildService(config).build_all(ALL_TARGETS, config.dist_dir))


@click.command("dev-build")
@add_common_options('pretty')
@standard_command
def dev_build_handler(pretty):
    """Build all deck binaries for native, WASM, and WASI targets.

    Unsupported combinations (UI apps on WASM/WASI) are reported as
    skipped; any failed build makes the command exit non-zero.
    """
    config = resolve_config(resolve_bin_dir=False)
    summary = build_everything(config)

    if pretty:
        render_build_table(summary)
    else:
        render_build_results(summary)

    if summary.failed:
        raise CommandError("some builds failed")


@click.command("dev-release")
@click.option("--skip-build", is_flag=True, help="Skip building and use existing dist binaries")
@click.option("--prerelease", is_flag=True, help="Mark as prerelease (always on for generated versions)")
@click.option("--version", "version", default="", help="Version tag (default: dev-YYYYMMDD-HHMMSS)")
@standard_command
def dev_release_handler(skip_build, prerelease, version):
    """Create a GitHub release with the built binaries.

    By default creates a timestamped prerelease (e.g. dev-20251029-143052).

    \b
    Examples:
        decktool dev-release                        # Auto-timestamped prerelease
        decktool dev-release --version=v0.1.0       # Official release
        decktool dev-release --skip-build           # Use existing dist binaries
    """
    config = resolve_config(resolve_bin_dir=False)

    if not skip_build:
        summary = build_everything(config)
        if summary.failed:
            render_build_results(summary)
            raise CommandError("some builds failed, cannot create release")
        click.echo("✓ Build completed")

    echo_progress(ReleaseService(config).publish(version, prerelease))


@click.command("dev-clean")
@standard_command
def dev_clean_handler():
    """Remove the cache folders (.data, .src, .dist, .fonts) for a fresh start."""
    config = resolve_config(resolve_bin_dir=False)

    for directory in config.cache_dirs():
        if directory.exists():
            click.echo(f"Removing {directory}...")
            shutil.rmtree(directory)
            click.echo(f"✓ Removed {directory}")
        else:
            click.echo(f"  Skipping {directory} (doesn't exist)")

    click.echo("\n✓ Dev clean complete - all dot folders removed")
