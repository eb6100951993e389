"""Shared output helpers for the cossync CLI."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click

from cossync.client.cli.config import load_config
from cossync.core.paths import norm_path

if TYPE_CHECKING:
    from cossync.client.api import Response
    from cossync.client.sync.types import RemoteEntry


def format_response(response: Response) -> str:
    """Render a response as ``http: code: message`` plus one line per data field."""
    lines = [f"{response.http_status}: {response.code}: {response.message}"]
    for key, value in response.data.items():
        lines.append(f"  {key}: {value}")
    return "\n".join(lines)


def format_entry(entry: RemoteEntry) -> str:
    """Render a scanned entry as one listing line."""
    if entry.is_directory:
        return f"{'DIR':>12}  {norm_path(entry.path)}/"
    size = entry.size if entry.size is not None else "-"
    return f"{size:>12}  {norm_path(entry.path)}"


def resolve_bucket(bucket: str | None) -> str:
    """Return the bucket option, or the configured default, or exit."""
    bucket = bucket or load_config().get("bucket")
    if not bucket:
        click.echo("Error: No bucket given. Use --bucket or 'cossync configure --bucket'.", err=True)
        sys.exit(1)
    return str(bucket).strip("/")


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Turn API, sync and local I/O failures into an error message and exit 1."""
    from cossync.client.api import APIError
    from cossync.client.sync.types import SyncError

    try:
        yield
    except (APIError, SyncError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


bucket_option = click.option(
    "--bucket", "-b", default=None, help="Bucket name (default: configured bucket)."
)
