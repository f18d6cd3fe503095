#!/usr/bin/env python3

import logging

import click

from decktool import __version__
from decktool.config import set_log_level
from decktool.commands.ensure import ensure_handler
from decktool.commands.examples import examples_handler
from decktool.commands.run import run_handler, view_handler
from decktool.commands.setup import setup_handler
from decktool.commands.completion import completion_handler
from decktool.commands.config import config_cmd

# Developer commands
from decktool.commands.dev import dev_build_handler, dev_release_handler, dev_clean_handler


@click.group()
@click.version_option(__version__, prog_name="decktool")
@click.option("-v", "--verbose", is_flag=True, help="Log every external command")
def cli(verbose):
    """decktool - Helper CLI for deck examples.

    Fetches example repositories and released binaries, renders examples,
    and builds and publishes the deck tools.
    """
    if verbose:
        set_log_level(logging.DEBUG)


# Core commands
cli.add_command(ensure_handler, name='ensure')
cli.add_command(examples_handler, name='examples')
cli.add_command(run_handler, name='run')
cli.add_command(view_handler, name='view')
cli.add_command(setup_handler, name='setup')
cli.add_command(completion_handler, name='completion')
cli.add_command(config_cmd)

# Developer commands
cli.add_command(dev_build_handler, name='dev-build')
cli.add_command(dev_release_handler, name='dev-release')
cli.add_command(dev_clean_handler, name='dev-clean')


def main():
    cli(prog_name="decktool")

if __name__ == "__main__":
    main()
