"""Remote tree commands for the cossync CLI.

Commands:
- mkdir: Create a remote folder
- ls: Scan a remote folder
- stat: Show metadata of a remote file or folder
- rm: Delete a remote file or folder recursively
"""

from __future__ import annotations

import click

from cossync.client.cli.config import require_cos_config
from cossync.client.cli.output import (
    bucket_option,
    exit_on_error,
    format_entry,
    format_response,
    resolve_bucket,
)


@click.command()
@bucket_option
@click.argument("path")
def mkdir(bucket: str | None, path: str) -> None:
    """Create a remote folder."""
    from cossync.client.api import CosClient

    bucket = resolve_bucket(bucket)
    with exit_on_error(), CosClient(require_cos_config()) as client:
        response = client.create_folder(bucket, path)
        click.echo(format_response(response))
        response.raise_for_code()


@click.command(name="ls")
@bucket_option
@click.option(
    "--depth", "-d", default=1, show_default=True, help="Levels to descend (-1 = all)."
)
@click.argument("path", default="/")
def ls(bucket: str | None, depth: int, path: str) -> None:
    """List a remote folder, optionally recursively."""
    from cossync.client.api import CosClient
    from cossync.client.sync import RemoteScanner

    bucket = resolve_bucket(bucket)
    with exit_on_error(), CosClient(require_cos_config()) as client:
        for entry in RemoteScanner(client).scan(bucket, path, depth):
            click.echo(format_entry(entry))


@click.command()
@bucket_option
@click.option("--folder", is_flag=True, help="Stat PATH as a folder.")
@click.argument("path")
def stat(bucket: str | None, folder: bool, path: str) -> None:
    """Show metadata of a remote file or folder."""
    from cossync.client.api import CosClient

    bucket = resolve_bucket(bucket)
    with exit_on_error(), CosClient(require_cos_config()) as client:
        if folder:
            response = client.stat_folder(bucket, path)
        else:
            response = client.stat_file(bucket, path)
        click.echo(format_response(response))
        response.raise_for_code()


@click.command()
@bucket_option
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.argument("path")
def rm(bucket: str | None, yes: bool, path: str) -> None:
    """Delete a remote file or folder recursively."""
    from cossync.client.api import CosClient
    from cossync.client.sync import SyncEngine

    bucket = resolve_bucket(bucket)
    if not yes and not click.confirm(f"Delete {bucket}:{path} and everything below it?"):
        return
    with exit_on_error(), CosClient(require_cos_config()) as client:
        results = SyncEngine(client).delete(bucket, path)
    click.echo(f"Deleted {len(results)} entries")
