"""Configure command for the cossync CLI.

Commands:
- configure: Store credentials and the default bucket
"""

from __future__ import annotations

import click

from cossync.client.cli.config import get_config_file, load_config, save_config


@click.command()
@click.option("--appid", prompt=True, help="Application id.")
@click.option("--secret-id", prompt=True, help="API secret id.")
@click.option("--secret-key", prompt=True, hide_input=True, help="API secret key.")
@click.option("--bucket", default=None, help="Default bucket for other commands.")
def configure(appid: str, secret_id: str, secret_key: str, bucket: str | None) -> None:
    """Store credentials in the cossync config file."""
    config = load_config()
    config.update({"appid": appid, "secret_id": secret_id, "secret_key": secret_key})
    if bucket:
        config["bucket"] = bucket.strip("/")
    save_config(config)
    click.echo(f"Configuration saved to {get_config_file()}")
