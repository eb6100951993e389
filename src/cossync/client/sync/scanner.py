"""Recursive scan of the remote tree.

This module provides:
- RemoteScanner: Walks a remote subtree to a bounded or unbounded depth and
  returns a flattened, deterministically ordered snapshot
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cossync.client.api import ListPattern, PathIsFileError
from cossync.client.sync.fanout import fan_out
from cossync.client.sync.lister import Lister
from cossync.client.sync.types import RemoteEntry, ScanSnapshot

if TYPE_CHECKING:
    from cossync.client.api import CosClient

logger = logging.getLogger(__name__)

UNBOUNDED = -1


class RemoteScanner:
    """Builds ScanSnapshots of remote subtrees.

    Usage:
        scanner = RemoteScanner(client)
        everything = scanner.scan("bucket", "photos", UNBOUNDED)
        children = scanner.scan("bucket", "photos", 1)
    """

    def __init__(
        self,
        client: CosClient,
        page_size: int | None = None,
        max_workers: int | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            client: Primitive client.
            page_size: Entries per list call (defaults to the client config).
            max_workers: Fan-out width per directory (defaults to the client config).
        """
        config = client.config
        self._client = client
        self._lister = Lister(
            client, page_size if page_size is not None else config.scan_page_size
        )
        self._max_workers = max_workers if max_workers is not None else config.max_workers

    def scan(self, bucket: str, path: str, depth: int) -> ScanSnapshot:
        """Scan a folder (or a single file) to the given depth.

        For every level, the snapshot lists that level's directories, then
        the recursion results of those directories in discovery order, then
        that level's files.

        Args:
            bucket: Bucket name.
            path: Root path of the scan.
            depth: 0 returns nothing, n > 0 descends n levels, negative is unbounded.

        Returns:
            Ordered list of entries.

        Raises:
            RemoteError: If a listing or the file fallback stat fails; when
                several subtrees fail, the first failure observed.
        """
        if depth == 0:
            return []

        dirs: list[RemoteEntry] = []
        files: list[RemoteEntry] = []
        try:
            for entry in self._lister.entries(bucket, path, ListPattern.BOTH):
                if entry.is_directory:
                    dirs.append(entry)
                else:
                    files.append(entry)
        except PathIsFileError:
            return [self._stat_file(bucket, path)]

        snapshot: ScanSnapshot = list(dirs)
        if depth != 1 and dirs:
            outcome = fan_out(
                dirs,
                lambda d: self.scan(bucket, d.path, depth - 1),
                self._max_workers,
                thread_name_prefix="cossync-scan",
            )
            outcome.raise_first()
            for sub in outcome.values():
                snapshot.extend(sub)
        snapshot.extend(files)
        return snapshot

    def _stat_file(self, bucket: str, path: str) -> RemoteEntry:
        # The path answered -166, so it is a file whether or not stat reports a sha
        logger.debug(f"{path} is a file, falling back to stat")
        result = self._client.stat_file(bucket, path).raise_for_code()
        info = dict(result.data)
        if result.sha is not None:
            info["sha"] = result.sha
        return RemoteEntry.from_info(info, path, is_directory=False)
