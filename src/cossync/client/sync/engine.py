"""Tree sync orchestrators.

This module provides:
- SyncEngine: Recursive upload, download and delete of whole folders

Every orchestrator fans out over the entries of a directory through
``fan_out`` and waits for all of them before returning. When several
branches fail, the first failure observed is raised and the other branches
are left as they ended up: a returned error means the tree may be partially
uploaded, downloaded or deleted.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from cossync.client.sync.download import FileDownloader
from cossync.client.sync.fanout import fan_out
from cossync.client.sync.scanner import UNBOUNDED, RemoteScanner
from cossync.client.sync.types import (
    DeleteResult,
    DownloadError,
    DownloadResult,
    RemoteEntry,
    UploadError,
    UploadResult,
)
from cossync.client.sync.upload import FileUploader
from cossync.core.paths import join

if TYPE_CHECKING:
    from cossync.client.api import CosClient

logger = logging.getLogger(__name__)


class SyncEngine:
    """Mirrors local trees to the remote tree and back.

    Usage:
        with CosClient(config) as client:
            engine = SyncEngine(client)
            engine.upload_folder(Path("site"), "bucket", "www")
            engine.download_folder("bucket", "www", Path("backup"))
            engine.delete("bucket", "www")
    """

    def __init__(
        self,
        client: CosClient,
        max_workers: int | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            client: Primitive client shared by all tasks.
            max_workers: Fan-out width per directory (defaults to the client
                config, 0 = one thread per entry).
            log: Logger receiving one message per completed mutation.
        """
        self._client = client
        self._max_workers = (
            max_workers if max_workers is not None else client.config.max_workers
        )
        self._log = log or logger
        self._scanner = RemoteScanner(client, max_workers=self._max_workers)
        self._uploader = FileUploader(client, log=self._log)
        self._downloader = FileDownloader(client, log=self._log)

    @property
    def scanner(self) -> RemoteScanner:
        """Get the remote scanner."""
        return self._scanner

    @property
    def uploader(self) -> FileUploader:
        """Get the file uploader."""
        return self._uploader

    @property
    def downloader(self) -> FileDownloader:
        """Get the file downloader."""
        return self._downloader

    # === Upload ===

    def upload(self, local_path: Path, bucket: str, remote_path: str) -> list[UploadResult]:
        """Upload a local file or folder.

        Returns:
            Results of every uploaded file.
        """
        local_path = Path(local_path)
        if local_path.is_dir():
            return self.upload_folder(local_path, bucket, remote_path)
        return [self._uploader.upload_file(local_path, bucket, remote_path)]

    def upload_folder(
        self, local_dir: Path, bucket: str, remote_path: str
    ) -> list[UploadResult]:
        """Upload a local folder recursively.

        Creates the remote folder, then uploads every entry concurrently:
        subdirectories recurse, files go through the FileUploader.

        Args:
            local_dir: Local folder.
            bucket: Bucket name.
            remote_path: Remote destination folder.

        Returns:
            Results of every uploaded file, in local listing order.

        Raises:
            UploadError: If local_dir is not a directory.
            Exception: The first failure observed among the entries.
        """
        local_dir = Path(local_dir)
        if not local_dir.is_dir():
            raise UploadError(f"Not a directory: {local_dir}")
        entries: list[tuple[str, bool]] = []
        with os.scandir(local_dir) as it:
            for e in it:
                if e.is_symlink() and e.is_dir():
                    # Symlinked folders may point at an ancestor
                    self._log.warning(f"{local_dir / e.name}: skipping symlinked folder")
                    continue
                entries.append((e.name, e.is_dir(follow_symlinks=False)))
        entries.sort()

        response = self._client.create_folder(bucket, remote_path)
        if response.ok:
            self._log.info(f"{remote_path}: {response.message}")
        else:
            # Usually the folder already exists; uploads below still proceed
            self._log.warning(
                f"{remote_path}: create folder returned {response.code} {response.message}"
            )

        def upload_entry(entry: tuple[str, bool]) -> list[UploadResult]:
            name, is_dir = entry
            target = join(remote_path, name)
            if is_dir:
                return self.upload_folder(local_dir / name, bucket, target)
            return [self._uploader.upload_file(local_dir / name, bucket, target)]

        outcome = fan_out(
            entries, upload_entry, self._max_workers, thread_name_prefix="cossync-upload"
        )
        outcome.raise_first()
        return [r for batch in outcome.values() for r in batch]

    # === Download ===

    def download_folder(
        self, bucket: str, remote_path: str, local_dir: Path
    ) -> list[DownloadResult]:
        """Download a remote folder recursively.

        Scans the whole subtree first, creates every directory locally, then
        downloads all files concurrently.

        Args:
            bucket: Bucket name.
            remote_path: Remote folder.
            local_dir: Local destination folder.

        Returns:
            Results of every downloaded file, in scan order.

        Raises:
            DownloadError: If a file fails or a remote name escapes local_dir.
        """
        local_dir = Path(local_dir)
        local_dir.mkdir(parents=True, exist_ok=True)

        snapshot = self._scanner.scan(bucket, remote_path, UNBOUNDED)
        for entry in snapshot:
            if entry.is_directory:
                target = self._local_target(entry, remote_path, local_dir)
                target.mkdir(parents=True, exist_ok=True)
                self._log.info(f"{target}: created")

        files = [e for e in snapshot if not e.is_directory]

        def download_entry(entry: RemoteEntry) -> DownloadResult:
            return self._downloader.download_file(
                bucket, entry.path, self._local_target(entry, remote_path, local_dir)
            )

        outcome = fan_out(
            files, download_entry, self._max_workers, thread_name_prefix="cossync-download"
        )
        outcome.raise_first()
        return outcome.values()

    @staticmethod
    def _local_target(entry: RemoteEntry, remote_path: str, local_dir: Path) -> Path:
        """Map a scanned entry to its path under local_dir.

        Raises:
            DownloadError: If the remote name would escape local_dir.
        """
        # Substitute the remote root prefix with the local folder
        relative = entry.path
        if relative.startswith(remote_path):
            relative = relative[len(remote_path):]
        relative = relative.strip("/")
        target = local_dir / relative if relative else local_dir / entry.name
        if not target.resolve().is_relative_to(local_dir.resolve()):
            raise DownloadError(f"Remote path {entry.path} escapes {local_dir}")
        return target

    # === Delete ===

    def delete(self, bucket: str, remote_path: str) -> list[DeleteResult]:
        """Delete a remote file or folder recursively.

        Scans one level, deletes every child concurrently (folders through
        recursion), and deletes the folder itself only once all children are
        gone. A path that turns out to be a file is deleted as such, with no
        folder delete following.

        Args:
            bucket: Bucket name.
            remote_path: Remote path to delete.

        Returns:
            One result per deleted entry; children precede their parent.

        Raises:
            RemoteError: If a scan or delete is rejected; the folder itself is
                kept when any child failed.
        """
        children = self._scanner.scan(bucket, remote_path, 1)
        if len(children) == 1 and children[0].path == remote_path:
            # Stat fallback: remote_path itself is a file
            result = self._delete_one(bucket, remote_path, is_directory=False)
            return [result] if result else []

        def delete_entry(entry: RemoteEntry) -> list[DeleteResult]:
            if entry.is_directory:
                return self.delete(bucket, entry.path)
            result = self._delete_one(bucket, entry.path, is_directory=False)
            return [result] if result else []

        outcome = fan_out(
            children, delete_entry, self._max_workers, thread_name_prefix="cossync-delete"
        )
        outcome.raise_first()
        results = [r for batch in outcome.values() for r in batch]

        folder = self._delete_one(bucket, remote_path, is_directory=True)
        if folder:
            results.append(folder)
        return results

    def _delete_one(self, bucket: str, path: str, is_directory: bool) -> DeleteResult | None:
        if is_directory:
            response = self._client.delete_folder(bucket, path)
        else:
            response = self._client.delete_file(bucket, path)
        if response is None:
            return None
        response.raise_for_code()
        self._log.info(f"{path}: {response.message}")
        return DeleteResult(path=path, is_directory=is_directory, response=response)
