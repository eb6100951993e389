"""Tests for core configuration classes."""

from __future__ import annotations

import dataclasses

import pytest

from cossync.core.config import (
    DEFAULT_ENDPOINT,
    DEFAULT_EXPIRED_SECONDS,
    DEFAULT_SLICE_THRESHOLD,
    CosConfig,
    Credentials,
)


def make_credentials() -> Credentials:
    """Create Credentials for testing."""
    return Credentials(appid="1250000", secret_id="AKIDtest", secret_key="secret")


class TestCredentials:
    """Tests for Credentials class."""

    def test_immutable(self) -> None:
        """Should refuse mutation after construction."""
        creds = make_credentials()
        with pytest.raises(dataclasses.FrozenInstanceError):
            creds.appid = "other"  # type: ignore[misc]

    def test_secret_key_hidden_from_repr(self) -> None:
        """Should not leak the secret key in repr."""
        assert "secret'" not in repr(make_credentials())
        assert "AKIDtest" in repr(make_credentials())


class TestCosConfig:
    """Tests for CosConfig class."""

    def test_defaults(self) -> None:
        """Should initialize with documented defaults."""
        config = CosConfig(credentials=make_credentials())
        assert config.endpoint == DEFAULT_ENDPOINT
        assert config.expired_seconds == DEFAULT_EXPIRED_SECONDS == 600
        assert config.slice_threshold == DEFAULT_SLICE_THRESHOLD == 10 * 1024 * 1024
        assert config.download_expiry == 86400
        assert config.insert_only is True
        assert config.timeout == 30.0

    def test_appid_from_credentials(self) -> None:
        """Should expose the credentials appid."""
        assert CosConfig(credentials=make_credentials()).appid == "1250000"

    def test_resource_url(self) -> None:
        """Should template the service endpoint on appid, bucket and path."""
        config = CosConfig(credentials=make_credentials())
        assert (
            config.resource_url("photos", "a/b.jpg")
            == "http://web.file.myqcloud.com/files/v1/1250000/photos/a/b.jpg"
        )

    def test_access_url(self) -> None:
        """Should template the public endpoint on bucket and appid."""
        config = CosConfig(credentials=make_credentials())
        assert (
            config.access_url("photos", "a/b.jpg")
            == "http://photos-1250000.file.myqcloud.com/a/b.jpg"
        )
