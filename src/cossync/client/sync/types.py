"""Shared types and dataclasses for sync operations.

This module provides:
- SyncError, UploadError, DownloadError: Exception classes
- RemoteEntry: One file or directory of the remote tree
- ListPage: One page of a paginated listing
- UploadSession: Negotiated state of a slice upload
- UploadResult, DownloadResult, DeleteResult: Operation result dataclasses
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cossync.client.api import Response


class SyncError(Exception):
    """Base exception for sync errors."""


class UploadError(SyncError):
    """Failed to upload a file."""


class DownloadError(SyncError):
    """Failed to download a file."""


# Keys of a listing info that are promoted to RemoteEntry attributes
_ENTRY_KEYS = ("name", "sha", "filesize")


@dataclass
class RemoteEntry:
    """A file or directory in the remote tree.

    Attributes:
        path: Full remote path, built client-side from parent path and name.
        name: Entry name as listed by the server.
        content_hash: SHA-1 of a file; None for directories.
        size: File size in bytes, if reported.
        extra: Remaining fields reported by the server.
        is_directory: Derived from content_hash unless given explicitly.
    """

    path: str
    name: str
    content_hash: str | None = None
    size: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    is_directory: bool | None = None

    def __post_init__(self) -> None:
        # A listed entry is a directory iff it has no content hash
        if self.is_directory is None:
            self.is_directory = self.content_hash is None

    @classmethod
    def from_info(
        cls, info: dict[str, Any], path: str, is_directory: bool | None = None
    ) -> RemoteEntry:
        """Create from a listing/stat info dictionary.

        Args:
            info: Entry fields reported by the server.
            path: Full remote path to assign to the entry.
            is_directory: Known entry kind; derived from ``sha`` if None.
        """
        size = info.get("filesize")
        name = info.get("name")
        if name is None:
            name = path.rstrip("/").rsplit("/", 1)[-1]
        return cls(
            path=path,
            name=str(name),
            content_hash=info.get("sha"),
            size=int(size) if size is not None else None,
            extra={k: v for k, v in info.items() if k not in _ENTRY_KEYS},
            is_directory=is_directory,
        )


# Ordered snapshot of a remote subtree
ScanSnapshot = list[RemoteEntry]


@dataclass
class ListPage:
    """One page of a folder listing."""

    entries: list[RemoteEntry]
    has_more: bool
    context: str | None = None


@dataclass
class UploadSession:
    """Server-negotiated state of one slice upload.

    session_id, offset and slice_size are dictated by the server on first
    sight and never recomputed locally.
    """

    session_id: str
    offset: int
    slice_size: int
    file_size: int
    content_hash: str


@dataclass
class UploadResult:
    """Result of a file upload operation."""

    local_path: Path
    remote_path: str
    size: int
    response: Response
    content_hash: str | None = None
    sliced: bool = False
    slices_sent: int = 0


@dataclass
class DownloadResult:
    """Result of a file download operation."""

    remote_path: str
    local_path: Path
    size: int


@dataclass
class DeleteResult:
    """Result of deleting one remote entry.

    Attributes:
        path: The deleted remote path.
        is_directory: Whether a folder entry was deleted.
        response: Server response.
    """

    path: str
    is_directory: bool
    response: Response
