"""HTTP client for the object storage files API.

This module provides:
- CosClient: the remote primitive client (create, stat, list, upload,
  slice prepare/upload, delete, plain download)
- Typed responses decoded once at the protocol boundary
  (Response, ListResult, StatResult, SliceResult)
- The error taxonomy (APIError and subclasses)
"""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, TypeVar
from urllib.parse import urlencode

import httpx

from cossync.core.auth import Signer
from cossync.core.config import CosConfig
from cossync.core.hashing import get_data_hash
from cossync.core.paths import file_path, folder_path, is_root

logger = logging.getLogger(__name__)

# Semantic code: the addressed path is a file, not a directory
PATH_IS_FILE = -166

DEFAULT_LIST_NUM = 30
DOWNLOAD_BLOCK_SIZE = 64 * 1024

PUBLIC_AUTHORITIES = frozenset({"eWPrivateRPublic", "public-read"})


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(APIError):
    """Connection failure or malformed response body."""


class ProtocolError(APIError):
    """Response is well-formed but lacks fields the protocol requires."""


class RemoteError(APIError):
    """Server reported a nonzero code."""

    def __init__(self, code: int, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{code}: {message}", status_code)
        self.code = code
        self.remote_message = message


class PathIsFileError(RemoteError):
    """Directory operation applied to a file (code -166)."""


class ListPattern(str, Enum):
    """Which entries a list call returns."""

    BOTH = "eListBoth"
    DIR_ONLY = "eListDirOnly"
    FILE_ONLY = "eListFileOnly"


R = TypeVar("R", bound="Response")


@dataclass
class Response:
    """Decoded response envelope.

    Attributes:
        http_status: Transport status code.
        code: Semantic code (0 is success).
        message: Server message.
        data: Raw data payload.
    """

    http_status: int
    code: int
    message: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Check if the server reported success."""
        return self.code == 0

    def raise_for_code(self: R) -> R:
        """Raise RemoteError unless the code is 0.

        Returns:
            self, for chaining.

        Raises:
            PathIsFileError: On code -166.
            RemoteError: On any other nonzero code.
        """
        if self.code == PATH_IS_FILE:
            raise PathIsFileError(self.code, self.message, self.http_status)
        if self.code != 0:
            raise RemoteError(self.code, self.message, self.http_status)
        return self

    @classmethod
    def _decode(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Extract operation-specific fields from the data payload."""
        return {}

    @classmethod
    def from_http(cls: type[R], response: httpx.Response) -> R:
        """Decode an HTTP response into a typed result.

        Raises:
            TransportError: If the body is not a JSON envelope or a field
                has the wrong type.
        """
        try:
            envelope = response.json()
        except ValueError as e:
            raise TransportError(
                f"Malformed response body: {e}", response.status_code
            ) from e
        if not isinstance(envelope, dict) or "code" not in envelope:
            raise TransportError("Response is not an envelope", response.status_code)

        data = envelope.get("data")
        if not isinstance(data, dict):
            data = {}
        try:
            code = int(envelope["code"])
            fields = cls._decode(data)
        except (TypeError, ValueError) as e:
            raise TransportError(
                f"Malformed response field: {e}", response.status_code
            ) from e
        return cls(
            http_status=response.status_code,
            code=code,
            message=str(envelope.get("message", "")),
            data=data,
            **fields,
        )


@dataclass
class ListResult(Response):
    """Result of a list call."""

    infos: list[dict[str, Any]] = field(default_factory=list)
    has_more: bool = False
    context: str | None = None

    @classmethod
    def _decode(cls, data: dict[str, Any]) -> dict[str, Any]:
        infos = data.get("infos") or []
        return {
            "infos": [i for i in infos if isinstance(i, dict)],
            "has_more": bool(data.get("has_more", False)),
            "context": data.get("context") or None,
        }


@dataclass
class StatResult(Response):
    """Result of a stat call (file, folder or bucket)."""

    name: str | None = None
    sha: str | None = None
    size: int | None = None
    authority: str | None = None
    access_url: str | None = None

    @classmethod
    def _decode(cls, data: dict[str, Any]) -> dict[str, Any]:
        size = data.get("filesize")
        return {
            "name": data.get("name"),
            "sha": data.get("sha"),
            "size": int(size) if size is not None else None,
            "authority": data.get("authority"),
            "access_url": data.get("access_url"),
        }


@dataclass
class SliceResult(Response):
    """Result of a slice prepare or slice upload call.

    A response carrying an access URL means the transfer is complete.
    """

    session: str | None = None
    offset: int | None = None
    slice_size: int | None = None
    url: str | None = None

    completion_keys: ClassVar[tuple[str, ...]] = ("url", "access_url")

    @property
    def completed(self) -> bool:
        """Check if the object is fully uploaded."""
        return self.url is not None

    @classmethod
    def _decode(cls, data: dict[str, Any]) -> dict[str, Any]:
        url = next((data[k] for k in cls.completion_keys if k in data), None)
        offset = data.get("offset")
        slice_size = data.get("slice_size")
        return {
            "session": data.get("session"),
            "offset": int(offset) if offset is not None else None,
            "slice_size": int(slice_size) if slice_size is not None else None,
            "url": url,
        }


class CosClient:
    """HTTP client for the object storage files API.

    Primitive calls return typed results without raising on nonzero codes;
    callers use ``raise_for_code()`` where a failure must abort. Transport
    failures raise TransportError.
    """

    def __init__(
        self,
        config: CosConfig,
        signer: Signer | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration (credentials, endpoints, limits).
            signer: Request signer (built from the credentials if omitted).
            http_client: HTTP transport (a new httpx.Client if omitted).
        """
        self._config = config
        self._signer = signer or Signer(config.credentials)
        self._client = http_client or httpx.Client(timeout=config.timeout)
        self._slots: threading.BoundedSemaphore | None = (
            threading.BoundedSemaphore(config.max_in_flight)
            if config.max_in_flight > 0
            else None
        )

    @property
    def config(self) -> CosConfig:
        """Get the client configuration."""
        return self._config

    @property
    def signer(self) -> Signer:
        """Get the request signer."""
        return self._signer

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> CosClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    # === Plumbing ===

    def _slot(self) -> contextlib.AbstractContextManager[Any]:
        return self._slots if self._slots is not None else contextlib.nullcontext()

    def _expired(self) -> int:
        return self._signer.now() + self._config.expired_seconds

    def _request(
        self,
        result_type: type[R],
        method: str,
        bucket: str,
        path: str,
        sign: str,
        **kwargs: Any,
    ) -> R:
        url = self._config.resource_url(bucket, path)
        headers = {"Authorization": sign}
        with self._slot():
            try:
                response = self._client.request(method, url, headers=headers, **kwargs)
            except httpx.RequestError as e:
                raise TransportError(f"{method} {url} failed: {e}") from e
        result = result_type.from_http(response)
        logger.debug(f"{method} {url}: {result.http_status} {result.code} {result.message}")
        return result

    def _form(self, fields: dict[str, Any]) -> dict[str, tuple[None, bytes]]:
        # Plain form fields sent as multipart parts
        return {k: (None, str(v).encode("utf-8")) for k, v in fields.items()}

    # === Directory operations ===

    def create_folder(self, bucket: str, path: str) -> Response:
        """Create a folder.

        Args:
            bucket: Bucket name.
            path: Folder path.
        """
        bucket = bucket.strip("/")
        return self._request(
            Response,
            "POST",
            bucket,
            folder_path(path),
            self._signer.sign_more(bucket, self._expired()),
            json={"op": "create"},
        )

    def list_dir(
        self,
        bucket: str,
        path: str,
        num: int = DEFAULT_LIST_NUM,
        pattern: ListPattern | str = ListPattern.BOTH,
        order: int = 0,
        context: str | None = None,
    ) -> ListResult:
        """List one page of a folder.

        Args:
            bucket: Bucket name.
            path: Folder path.
            num: Page size (non-positive values fall back to 30).
            pattern: Which entries to return.
            order: 0 for ascending, 1 for descending.
            context: Opaque cursor from the previous page.

        Returns:
            ListResult (code -166 if the path is a file).
        """
        bucket = bucket.strip("/")
        params: dict[str, Any] = {"op": "list"}
        params["num"] = num if num > 0 else DEFAULT_LIST_NUM
        try:
            params["pattern"] = ListPattern(pattern).value
        except ValueError:
            params["pattern"] = ListPattern.BOTH.value
        params["order"] = order if order in (0, 1) else 0
        if context:
            params["context"] = context
        return self._request(
            ListResult,
            "GET",
            bucket,
            folder_path(path),
            self._signer.sign_more(bucket, self._expired()),
            params=params,
        )

    # === Stat ===

    def _stat(self, bucket: str, resource: str) -> StatResult:
        bucket = bucket.strip("/")
        return self._request(
            StatResult,
            "GET",
            bucket,
            resource,
            self._signer.sign_more(bucket, self._expired()),
            params={"op": "stat"},
        )

    def stat_file(self, bucket: str, path: str) -> StatResult:
        """Stat a file."""
        return self._stat(bucket, file_path(path))

    def stat_folder(self, bucket: str, path: str) -> StatResult:
        """Stat a folder."""
        return self._stat(bucket, folder_path(path))

    def stat_bucket(self, bucket: str) -> StatResult:
        """Stat the bucket itself (carries the ``authority`` field)."""
        return self._stat(bucket, "")

    def get_sha(self, bucket: str, path: str) -> str | None:
        """Get the content hash of a remote file.

        Returns:
            The SHA-1 hex digest, or None if the server reports none.

        Raises:
            RemoteError: If the stat call fails.
        """
        return self.stat_file(bucket, path).raise_for_code().sha

    def is_bucket_public(self, bucket: str) -> bool:
        """Check whether the bucket allows unsigned reads.

        Raises:
            RemoteError: If the bucket stat fails.
        """
        result = self.stat_bucket(bucket).raise_for_code()
        return result.authority in PUBLIC_AUTHORITIES

    # === Uploads ===

    def upload(self, bucket: str, path: str, data: bytes) -> Response:
        """Upload a whole file in one request.

        Args:
            bucket: Bucket name.
            path: Remote file path.
            data: File content.
        """
        bucket = bucket.strip("/")
        resource = file_path(path)
        fields = {
            "op": "upload",
            "sha": get_data_hash(data),
            "insertOnly": int(self._config.insert_only),
        }
        files: dict[str, Any] = self._form(fields)
        files["filecontent"] = (resource, data)
        return self._request(
            Response,
            "POST",
            bucket,
            resource,
            self._signer.sign_more(bucket, self._expired()),
            files=files,
        )

    def prepare_slice(self, bucket: str, path: str, file_size: int, sha: str) -> SliceResult:
        """Open (or resume) a slice upload session.

        Args:
            bucket: Bucket name.
            path: Remote file path.
            file_size: Total size of the file.
            sha: SHA-1 of the whole file.

        Returns:
            SliceResult with session/offset/slice_size, or a completed
            result if the content is already stored.
        """
        bucket = bucket.strip("/")
        fields = {
            "op": "upload_slice",
            "filesize": file_size,
            "sha": sha,
            "insertOnly": int(self._config.insert_only),
        }
        return self._request(
            SliceResult,
            "POST",
            bucket,
            file_path(path),
            self._signer.sign_more(bucket, self._expired()),
            files=self._form(fields),
        )

    def upload_slice(
        self,
        bucket: str,
        path: str,
        session: str,
        offset: int,
        data: bytes,
    ) -> SliceResult:
        """Send one slice of an open session.

        Args:
            bucket: Bucket name.
            path: Remote file path.
            session: Session id from prepare_slice.
            offset: Byte offset of this slice in the file.
            data: Slice content.
        """
        bucket = bucket.strip("/")
        resource = file_path(path)
        fields = {
            "op": "upload_slice",
            "sha": get_data_hash(data),
            "session": session,
            "offset": offset,
            "insertOnly": int(self._config.insert_only),
        }
        files: dict[str, Any] = self._form(fields)
        files["filecontent"] = (resource, data)
        return self._request(
            SliceResult,
            "POST",
            bucket,
            resource,
            self._signer.sign_more(bucket, self._expired()),
            files=files,
        )

    # === Delete ===

    def _delete(self, bucket: str, resource: str) -> Response | None:
        if is_root(resource):
            logger.debug(f"Refusing to delete bucket root of {bucket}")
            return None
        bucket = bucket.strip("/")
        file_id = f"/{self._config.appid}/{bucket}/{resource}"
        return self._request(
            Response,
            "POST",
            bucket,
            resource,
            self._signer.sign_once(bucket, file_id),
            json={"op": "delete"},
        )

    def delete_file(self, bucket: str, path: str) -> Response | None:
        """Delete a file.

        Returns:
            The response, or None if path is the bucket root (no request).
        """
        return self._delete(bucket, file_path(path))

    def delete_folder(self, bucket: str, path: str) -> Response | None:
        """Delete an empty folder.

        Returns:
            The response, or None if path is the bucket root (no request).
        """
        return self._delete(bucket, folder_path(path))

    # === Direct access ===

    def get_access_url(self, bucket: str, path: str) -> str:
        """Unsigned URL of an object in a public-read bucket."""
        resource = file_path(path)
        return self._config.access_url(bucket.strip("/"), resource)

    def get_access_url_with_token(self, bucket: str, path: str, expire: int) -> str:
        """Signed URL of an object, valid for ``expire`` seconds."""
        bucket = bucket.strip("/")
        sign = self._signer.sign_more(bucket, self._signer.now() + expire)
        return f"{self.get_access_url(bucket, path)}?{urlencode({'sign': sign})}"

    @contextlib.contextmanager
    def _stream(self, url: str) -> Iterator[httpx.Response]:
        with self._slot():
            try:
                with self._client.stream("GET", url) as response:
                    yield response
            except httpx.RequestError as e:
                raise TransportError(f"GET {url} failed: {e}") from e

    def download(self, url: str, dest: Path) -> int:
        """Stream an object to a local file with a plain GET.

        Args:
            url: Direct or signed access URL.
            dest: File to write (truncated if it exists).

        Returns:
            Number of bytes written.

        Raises:
            APIError: If the server answers with an error status.
            TransportError: On connection failure.
        """
        written = 0
        with self._stream(url) as response:
            if response.status_code >= 400:
                raise APIError(
                    f"GET {url} returned {response.status_code}", response.status_code
                )
            with open(dest, "wb") as f:
                for block in response.iter_bytes(DOWNLOAD_BLOCK_SIZE):
                    f.write(block)
                    written += len(block)
        return written
