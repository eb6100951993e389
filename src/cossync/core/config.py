"""Shared configuration classes for cossync.

This module defines the credentials and client settings used by the
primitive client, the signer and the sync orchestrators.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_ENDPOINT = "http://web.file.myqcloud.com/files/v1/{appid}/{bucket}/{path}"
DEFAULT_FILE_ENDPOINT = "http://{bucket}-{appid}.file.myqcloud.com/{path}"

DEFAULT_EXPIRED_SECONDS = 600
DEFAULT_DOWNLOAD_EXPIRY = 86400
DEFAULT_SLICE_THRESHOLD = 10 * 1024 * 1024  # 10 MiB
DEFAULT_SCAN_PAGE_SIZE = 100


@dataclass(frozen=True)
class Credentials:
    """Account credentials, consumed only by the request signer.

    Attributes:
        appid: Project/application id the buckets belong to.
        secret_id: Public half of the API key pair.
        secret_key: Private half of the API key pair (HMAC key).
    """

    appid: str
    secret_id: str
    secret_key: str = field(repr=False)


@dataclass
class CosConfig:
    """Configuration for talking to the storage service.

    Attributes:
        credentials: Account credentials.
        endpoint: URL template for mutation/listing/stat operations.
        file_endpoint: URL template for direct object retrieval.
        expired_seconds: Validity of multi-use request signatures.
        timeout: Request timeout in seconds.
        insert_only: Refuse to overwrite existing objects on upload.
        scan_page_size: Page size used by the scanner.
        slice_threshold: Files at or above this size use slice upload.
        max_workers: Fan-out width per directory (0 = unbounded).
        max_in_flight: Concurrent remote calls per client (0 = unbounded).
        download_expiry: Validity of signed download URLs.
    """

    credentials: Credentials
    endpoint: str = DEFAULT_ENDPOINT
    file_endpoint: str = DEFAULT_FILE_ENDPOINT
    expired_seconds: int = DEFAULT_EXPIRED_SECONDS
    timeout: float = 30.0
    insert_only: bool = True
    scan_page_size: int = DEFAULT_SCAN_PAGE_SIZE
    slice_threshold: int = DEFAULT_SLICE_THRESHOLD
    max_workers: int = 16
    max_in_flight: int = 32
    download_expiry: int = DEFAULT_DOWNLOAD_EXPIRY

    @property
    def appid(self) -> str:
        """Get the account appid."""
        return self.credentials.appid

    def resource_url(self, bucket: str, path: str) -> str:
        """Build the service URL for an already escaped resource path."""
        return self.endpoint.format(appid=self.appid, bucket=bucket, path=path)

    def access_url(self, bucket: str, path: str) -> str:
        """Build the public-access URL for an already escaped object path."""
        return self.file_endpoint.format(appid=self.appid, bucket=bucket, path=path)
