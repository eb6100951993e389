"""Core module - Shared configuration, signing, paths and hashing."""

from cossync.core.auth import Signer
from cossync.core.config import CosConfig, Credentials
from cossync.core.hashing import compute_file_hash, get_data_hash
from cossync.core.paths import file_path, folder_path, norm_path, url_safe_path

__all__ = [
    # Auth
    "Signer",
    # Config
    "CosConfig",
    "Credentials",
    # Hashing
    "compute_file_hash",
    "get_data_hash",
    # Paths
    "file_path",
    "folder_path",
    "norm_path",
    "url_safe_path",
]
