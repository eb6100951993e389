"""Configuration utilities for the cossync CLI.

This module provides shared configuration functions used across CLI commands.
Settings live in ~/.cossync/config.json; credentials may be overridden with
the COSSYNC_APPID, COSSYNC_SECRET_ID and COSSYNC_SECRET_KEY environment
variables.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any

import click

from cossync.core.config import CosConfig, Credentials

ENV_PREFIX = "COSSYNC_"
CREDENTIAL_KEYS = ("appid", "secret_id", "secret_key")

# Optional CosConfig fields that may be set in the config file
TUNABLE_KEYS = (
    "endpoint",
    "file_endpoint",
    "expired_seconds",
    "timeout",
    "insert_only",
    "scan_page_size",
    "slice_threshold",
    "max_workers",
    "max_in_flight",
    "download_expiry",
)


def get_config_dir() -> Path:
    """Get the configuration directory for cossync.

    Returns:
        Path to ~/.cossync or equivalent.
    """
    return Path.home() / ".cossync"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def build_cos_config(config: dict[str, Any]) -> CosConfig:
    """Build a CosConfig from stored settings and the environment.

    Raises:
        KeyError: If a credential is neither stored nor in the environment.
    """
    values = dict(config)
    for key in CREDENTIAL_KEYS:
        env_value = os.environ.get(ENV_PREFIX + key.upper())
        if env_value:
            values[key] = env_value
    missing = [k for k in CREDENTIAL_KEYS if not values.get(k)]
    if missing:
        raise KeyError(", ".join(missing))

    credentials = Credentials(
        appid=str(values["appid"]),
        secret_id=str(values["secret_id"]),
        secret_key=str(values["secret_key"]),
    )
    tunables = {k: values[k] for k in TUNABLE_KEYS if k in values}
    return CosConfig(credentials=credentials, **tunables)


def require_cos_config() -> CosConfig:
    """Load the client configuration or exit with an error message."""
    try:
        return build_cos_config(load_config())
    except KeyError as e:
        click.echo(
            f"Error: Missing credentials ({e.args[0]}). Run 'cossync configure' first.",
            err=True,
        )
        sys.exit(1)
