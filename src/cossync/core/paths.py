"""Remote path normalization.

Paths are trimmed of leading and trailing slashes; an empty result
normalizes to "/". Directory-addressing operations append a trailing slash
before the result is URL-path-escaped.
"""

from __future__ import annotations

from urllib.parse import quote

ROOT = "/"


def norm_path(path: str) -> str:
    """Trim slashes from both ends of a path, mapping empty to "/"."""
    path = path.strip("/")
    return path or ROOT


def url_safe_path(path: str) -> str:
    """Escape a path for use inside a URL, keeping "/" separators."""
    return quote(path, safe="/~")


def file_path(path: str) -> str:
    """Escaped resource path addressing a file."""
    return url_safe_path(norm_path(path))


def folder_path(path: str) -> str:
    """Escaped resource path addressing a directory.

    The bucket root maps to the empty resource path, so that the endpoint
    template ends with a single slash.
    """
    normalized = norm_path(path)
    if normalized == ROOT:
        return ""
    return url_safe_path(normalized + "/")


def is_root(path: str) -> bool:
    """Check whether a resource path addresses the bucket root."""
    return path in ("", ROOT)


def join(parent: str, name: str) -> str:
    """Join a parent remote path and an entry name.

    Plain concatenation: listing never hands out full paths, so the full
    path of an entry is always its parent path plus its name.
    """
    return parent + "/" + name
