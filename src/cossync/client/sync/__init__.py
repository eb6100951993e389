"""Sync operations over the remote tree.

Architecture:
    SyncEngine → RemoteScanner → Lister → CosClient
    SyncEngine → FileUploader / FileDownloader → CosClient

Components:
- **Lister**: Cursor-driven pagination over the list primitive
- **RemoteScanner**: Depth-bounded recursive scan into an ordered snapshot
- **FileUploader**: Whole-file and resumable slice uploads
- **FileDownloader**: Direct or signed-URL download with atomic write
- **SyncEngine**: Concurrent upload_folder / download_folder / delete
- **fan_out**: Bounded fan-out/fan-in used by the scanner and the engine
"""

from cossync.client.sync.download import FileDownloader
from cossync.client.sync.engine import SyncEngine
from cossync.client.sync.fanout import FanOutResult, fan_out
from cossync.client.sync.lister import Lister
from cossync.client.sync.scanner import UNBOUNDED, RemoteScanner
from cossync.client.sync.types import (
    DeleteResult,
    DownloadError,
    DownloadResult,
    ListPage,
    RemoteEntry,
    ScanSnapshot,
    SyncError,
    UploadError,
    UploadResult,
    UploadSession,
)
from cossync.client.sync.upload import FileUploader

__all__ = [
    # Types and dataclasses
    "DeleteResult",
    "DownloadError",
    "DownloadResult",
    "ListPage",
    "RemoteEntry",
    "ScanSnapshot",
    "SyncError",
    "UploadError",
    "UploadResult",
    "UploadSession",
    # Concurrency
    "FanOutResult",
    "fan_out",
    # Components
    "FileDownloader",
    "FileUploader",
    "Lister",
    "RemoteScanner",
    "SyncEngine",
    "UNBOUNDED",
]
