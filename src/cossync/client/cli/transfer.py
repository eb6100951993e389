"""Transfer commands for the cossync CLI.

Commands:
- upload: Upload a local file or folder
- download: Download a remote folder
"""

from __future__ import annotations

from pathlib import Path

import click

from cossync.client.cli.config import require_cos_config
from cossync.client.cli.output import bucket_option, exit_on_error, resolve_bucket


@click.command()
@bucket_option
@click.argument("local_path", type=click.Path(exists=True, path_type=Path))
@click.argument("remote_path")
def upload(bucket: str | None, local_path: Path, remote_path: str) -> None:
    """Upload LOCAL_PATH (file or folder) to REMOTE_PATH."""
    from cossync.client.api import CosClient
    from cossync.client.sync import SyncEngine

    bucket = resolve_bucket(bucket)
    with exit_on_error(), CosClient(require_cos_config()) as client:
        results = SyncEngine(client).upload(local_path, bucket, remote_path)
    total = sum(r.size for r in results)
    click.echo(f"Uploaded {len(results)} files ({total} bytes)")


@click.command()
@bucket_option
@click.argument("remote_path")
@click.argument("local_dir", type=click.Path(file_okay=False, path_type=Path))
def download(bucket: str | None, remote_path: str, local_dir: Path) -> None:
    """Download the remote folder REMOTE_PATH into LOCAL_DIR."""
    from cossync.client.api import CosClient
    from cossync.client.sync import SyncEngine

    bucket = resolve_bucket(bucket)
    with exit_on_error(), CosClient(require_cos_config()) as client:
        results = SyncEngine(client).download_folder(bucket, remote_path, local_dir)
    total = sum(r.size for r in results)
    click.echo(f"Downloaded {len(results)} files ({total} bytes)")
