"""Content hashing for uploads.

The service identifies payloads by their SHA-1 digest, both for whole files
(deduplication on slice prepare) and for each slice sent.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

READ_BLOCK_SIZE = 1024 * 1024


def get_data_hash(data: bytes) -> str:
    """Compute the hex SHA-1 digest of a byte string."""
    return hashlib.sha1(data).hexdigest()


def compute_file_hash(path: Path) -> tuple[str, int]:
    """Compute the SHA-1 digest and size of a file in one pass.

    Args:
        path: Path to the file to hash.

    Returns:
        Tuple of (hex digest, number of bytes read).
    """
    hasher = hashlib.sha1()
    size = 0
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(READ_BLOCK_SIZE), b""):
            hasher.update(block)
            size += len(block)
    return hasher.hexdigest(), size
