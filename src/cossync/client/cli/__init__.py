"""Command-line interface for cossync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- configure: Store credentials and the default bucket
- mkdir: Create a remote folder
- ls: Scan a remote folder
- stat: Show metadata of a remote file or folder
- rm: Delete a remote file or folder recursively
- upload: Upload a local file or folder
- download: Download a remote folder
"""

from __future__ import annotations

import logging
import sys

import click

from cossync.client.cli.config import (
    build_cos_config,
    get_config_dir,
    get_config_file,
    load_config,
    save_config,
)
from cossync.client.cli.configure import configure
from cossync.client.cli.output import format_response
from cossync.client.cli.remote import ls, mkdir, rm, stat
from cossync.client.cli.transfer import download, upload


def setup_logging(verbose: bool) -> None:
    """Send cossync log records to stderr.

    Args:
        verbose: Include debug records.
    """
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger("cossync")
    root_logger.handlers = [handler]
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)


@click.group()
@click.version_option(package_name="cossync")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output.")
def cli(verbose: bool) -> None:
    """cossync - Mirror folders to and from object storage."""
    setup_logging(verbose)


# Configuration
cli.add_command(configure)

# Remote tree commands
cli.add_command(mkdir)
cli.add_command(ls)
cli.add_command(stat)
cli.add_command(rm)

# Transfers
cli.add_command(upload)
cli.add_command(download)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "build_cos_config",
    "get_config_dir",
    "get_config_file",
    "load_config",
    "save_config",
    # Output
    "format_response",
]
