"""File upload, whole or in resumable slices.

This module provides:
- FileUploader: Uploads one local file to one remote path. Small files go in a
  single request; larger ones through the slice protocol, where the server
  dictates session, offset and slice size.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from cossync.client.api import ProtocolError, SliceResult
from cossync.client.sync.types import UploadError, UploadResult, UploadSession
from cossync.core.hashing import compute_file_hash

if TYPE_CHECKING:
    from cossync.client.api import CosClient

logger = logging.getLogger(__name__)


class FileUploader:
    """Handles uploading one file to one remote path."""

    def __init__(
        self,
        client: CosClient,
        slice_threshold: int | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the uploader.

        Args:
            client: Primitive client.
            slice_threshold: Files at least this large use slice upload
                (defaults to the client config).
            log: Logger receiving per-file outcome messages.
        """
        self._client = client
        self._slice_threshold = (
            slice_threshold if slice_threshold is not None else client.config.slice_threshold
        )
        self._log = log or logger

    def upload_file(self, local_path: Path, bucket: str, remote_path: str) -> UploadResult:
        """Upload a file, choosing whole-file or slice upload by size.

        Args:
            local_path: Local file to upload.
            bucket: Bucket name.
            remote_path: Destination path.

        Returns:
            UploadResult with the final server response.

        Raises:
            UploadError: If the local file is missing.
            RemoteError: If the server rejects the upload.
        """
        local_path = Path(local_path)
        if not local_path.is_file():
            raise UploadError(f"File not found: {local_path}")

        if local_path.stat().st_size < self._slice_threshold:
            data = local_path.read_bytes()
            response = self._client.upload(bucket, remote_path, data).raise_for_code()
            result = UploadResult(
                local_path=local_path,
                remote_path=remote_path,
                size=len(data),
                response=response,
            )
        else:
            result = self.upload_slice(local_path, bucket, remote_path)

        self._log.info(f"{remote_path}: {result.response.message}")
        return result

    def upload_slice(self, local_path: Path, bucket: str, remote_path: str) -> UploadResult:
        """Upload a file through the resumable slice protocol.

        The whole file is hashed once, then ``prepare_slice`` either reports
        completion (content already stored) or opens a session. Slices are
        then sent from the server-declared offset, each ``slice_size`` bytes
        long (the last one may be short). The loop ends when a response
        reports completion or the tracked offset passes the file size.

        Args:
            local_path: Local file to upload.
            bucket: Bucket name.
            remote_path: Destination path.

        Returns:
            UploadResult carrying the last server response.

        Raises:
            RemoteError: If any response carries a nonzero code.
            ProtocolError: If the server omits the session or slice size.
            OSError: On local read/seek failures.
        """
        local_path = Path(local_path)
        content_hash, file_size = compute_file_hash(local_path)

        response = self._client.prepare_slice(
            bucket, remote_path, file_size, content_hash
        ).raise_for_code()
        if response.completed:
            logger.debug(f"{remote_path}: already stored, nothing to transfer")
            return self._result(local_path, remote_path, file_size, content_hash, response, 0)

        session = self._open_session(response, file_size, content_hash)
        offset = session.offset
        slices_sent = 0
        with open(local_path, "rb") as f:
            while True:
                data = self._read_slice(f, offset, session.slice_size)
                response = self._client.upload_slice(
                    bucket, remote_path, session.session_id, offset, data
                ).raise_for_code()
                slices_sent += 1
                logger.debug(
                    f"{remote_path}: sent {len(data)} bytes at offset {offset}/{file_size}"
                )
                if response.completed:
                    break
                offset += session.slice_size
                if offset > file_size:
                    break

        return self._result(
            local_path, remote_path, file_size, content_hash, response, slices_sent
        )

    def _open_session(
        self, response: SliceResult, file_size: int, content_hash: str
    ) -> UploadSession:
        if not response.session:
            raise ProtocolError("Slice prepare response has no session", response.http_status)
        if response.slice_size is None or response.slice_size <= 0:
            raise ProtocolError(
                "Slice prepare response has no slice size", response.http_status
            )
        return UploadSession(
            session_id=response.session,
            offset=response.offset or 0,
            slice_size=response.slice_size,
            file_size=file_size,
            content_hash=content_hash,
        )

    @staticmethod
    def _read_slice(f: BinaryIO, offset: int, size: int) -> bytes:
        # A short read at end of file is a valid final slice
        f.seek(offset)
        return f.read(size)

    @staticmethod
    def _result(
        local_path: Path,
        remote_path: str,
        size: int,
        content_hash: str,
        response: SliceResult,
        slices_sent: int,
    ) -> UploadResult:
        return UploadResult(
            local_path=local_path,
            remote_path=remote_path,
            size=size,
            response=response,
            content_hash=content_hash,
            sliced=True,
            slices_sent=slices_sent,
        )
