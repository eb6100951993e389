"""File download through direct or signed access URLs.

This module provides:
- FileDownloader: Streams one remote object to a local file with atomic write
"""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from cossync.client.api import APIError, TransportError
from cossync.client.sync.types import DownloadError, DownloadResult

if TYPE_CHECKING:
    from cossync.client.api import CosClient

logger = logging.getLogger(__name__)


class FileDownloader:
    """Handles file download with atomic writes."""

    def __init__(
        self,
        client: CosClient,
        expiry: int | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the downloader.

        Args:
            client: Primitive client.
            expiry: Validity of signed URLs for private buckets, in seconds
                (defaults to the client config).
            log: Logger receiving per-file outcome messages.
        """
        self._client = client
        self._expiry = expiry if expiry is not None else client.config.download_expiry
        self._log = log or logger

    def access_url(self, bucket: str, remote_path: str) -> str:
        """Pick the URL to fetch an object from.

        Public-read buckets are read through the unsigned URL; others through
        a token-signed URL.
        """
        if self._client.is_bucket_public(bucket):
            return self._client.get_access_url(bucket, remote_path)
        return self._client.get_access_url_with_token(bucket, remote_path, self._expiry)

    def download_file(self, bucket: str, remote_path: str, local_path: Path) -> DownloadResult:
        """Download an object with atomic write.

        Uses a temporary file (.tmp) during download, then atomically
        renames to the target path on success. This ensures no partial
        files are left on disk if download is interrupted.

        Args:
            bucket: Bucket name.
            remote_path: Remote file path.
            local_path: Where to save the file.

        Returns:
            DownloadResult with local metadata.

        Raises:
            DownloadError: If the object could not be fetched.
            RemoteError: If the bucket visibility check fails.
        """
        local_path = Path(local_path)
        url = self.access_url(bucket, remote_path)

        local_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = local_path.with_suffix(local_path.suffix + ".tmp")

        try:
            try:
                size = self._client.download(url, tmp_path)
            except TransportError:
                raise
            except APIError as e:
                raise DownloadError(f"Failed to download {remote_path}: {e}") from e

            # On Windows, need to remove existing file first
            if local_path.exists():
                local_path.unlink()
            tmp_path.rename(local_path)
        except Exception:
            if tmp_path.exists():
                with contextlib.suppress(OSError):
                    tmp_path.unlink()
            raise

        self._log.info(f"{local_path}: downloaded {size} bytes")
        return DownloadResult(remote_path=remote_path, local_path=local_path, size=size)
