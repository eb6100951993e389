"""Shared fixtures: an in-memory stand-in for the storage service.

FakeCosClient implements the primitive client surface used by the sync
layer (list, stat, create, upload, delete, download) over an in-memory tree,
and records every call so tests can assert on request sequences.
"""

from __future__ import annotations

import hashlib
import threading
from pathlib import Path
from typing import Any

import pytest

from cossync.client.api import (
    PATH_IS_FILE,
    ListResult,
    Response,
    StatResult,
)
from cossync.core.config import CosConfig, Credentials
from cossync.core.paths import ROOT, norm_path

NOT_FOUND = -197
NOT_EMPTY = -173


def make_cos_config(**overrides: Any) -> CosConfig:
    """Create a CosConfig for testing."""
    values: dict[str, Any] = {
        "credentials": Credentials(appid="1250000", secret_id="AKIDtest", secret_key="secret"),
        "endpoint": "http://test/files/v1/{appid}/{bucket}/{path}",
        "file_endpoint": "http://{bucket}-{appid}.test/{path}",
        "max_workers": 4,
        "scan_page_size": 2,
    }
    values.update(overrides)
    return CosConfig(**values)


def _parent(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ROOT


def _name(path: str) -> str:
    return path.rsplit("/", 1)[-1]


class FakeCosClient:
    """In-memory storage service speaking the CosClient interface."""

    def __init__(self, config: CosConfig | None = None, public: bool = True) -> None:
        self.config = config or make_cos_config()
        self.public = public
        self.dirs: set[str] = {ROOT}
        self.files: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail: dict[tuple[str, str], int] = {}
        self._lock = threading.Lock()

    def close(self) -> None:
        pass

    def __enter__(self) -> FakeCosClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # === Tree setup ===

    def add_dir(self, path: str) -> None:
        path = norm_path(path)
        while path != ROOT:
            self.dirs.add(path)
            path = _parent(path)

    def add_file(self, path: str, data: bytes = b"data") -> None:
        path = norm_path(path)
        self.add_dir(_parent(path))
        self.files[path] = data

    def children(self, path: str) -> tuple[list[str], list[str]]:
        dirs = sorted(d for d in self.dirs if d != ROOT and _parent(d) == path)
        files = sorted(f for f in self.files if _parent(f) == path)
        return dirs, files

    def _record(self, op: str, path: str) -> int:
        with self._lock:
            self.calls.append((op, path))
            return self.fail.get((op, norm_path(path)), 0)

    def ops(self, op: str) -> list[str]:
        return [p for o, p in self.calls if o == op]

    # === Primitives ===

    def list_dir(
        self,
        bucket: str,
        path: str,
        num: int = 30,
        pattern: Any = None,
        order: int = 0,
        context: str | None = None,
    ) -> ListResult:
        code = self._record("list", path)
        if code:
            return ListResult(http_status=400, code=code, message="injected")
        key = norm_path(path)
        if key in self.files:
            return ListResult(http_status=400, code=PATH_IS_FILE, message="path is a file")
        if key not in self.dirs:
            return ListResult(http_status=404, code=NOT_FOUND, message="not found")

        dirs, files = self.children(key)
        infos: list[dict[str, Any]] = [{"name": _name(d)} for d in dirs]
        infos += [
            {
                "name": _name(f),
                "sha": hashlib.sha1(self.files[f]).hexdigest(),
                "filesize": len(self.files[f]),
            }
            for f in files
        ]
        start = int(context) if context else 0
        page = infos[start : start + num]
        has_more = start + num < len(infos)
        return ListResult(
            http_status=200,
            code=0,
            message="SUCCESS",
            data={"infos": page, "has_more": has_more},
            infos=page,
            has_more=has_more,
            context=str(start + num) if has_more else None,
        )

    def stat_file(self, bucket: str, path: str) -> StatResult:
        code = self._record("stat", path)
        key = norm_path(path)
        if code or key not in self.files:
            return StatResult(http_status=404, code=code or NOT_FOUND, message="not found")
        data = self.files[key]
        sha = hashlib.sha1(data).hexdigest()
        return StatResult(
            http_status=200,
            code=0,
            message="SUCCESS",
            data={"sha": sha, "filesize": len(data)},
            sha=sha,
            size=len(data),
        )

    def create_folder(self, bucket: str, path: str) -> Response:
        code = self._record("create", path)
        if code:
            return Response(http_status=400, code=code, message="injected")
        self.add_dir(path)
        return Response(http_status=200, code=0, message="SUCCESS")

    def upload(self, bucket: str, path: str, data: bytes) -> Response:
        code = self._record("upload", path)
        if code:
            return Response(http_status=400, code=code, message="injected")
        self.add_file(path, data)
        return Response(http_status=200, code=0, message="SUCCESS")

    def delete_file(self, bucket: str, path: str) -> Response | None:
        if norm_path(path) == ROOT:
            return None
        code = self._record("delete_file", path)
        if code:
            return Response(http_status=400, code=code, message="injected")
        with self._lock:
            self.files.pop(norm_path(path), None)
        return Response(http_status=200, code=0, message="SUCCESS")

    def delete_folder(self, bucket: str, path: str) -> Response | None:
        key = norm_path(path)
        if key == ROOT:
            return None
        code = self._record("delete_folder", path)
        if code:
            return Response(http_status=400, code=code, message="injected")
        with self._lock:
            dirs, files = self.children(key)
            if dirs or files:
                return Response(http_status=400, code=NOT_EMPTY, message="not empty")
            self.dirs.discard(key)
        return Response(http_status=200, code=0, message="SUCCESS")

    def is_bucket_public(self, bucket: str) -> bool:
        self._record("stat_bucket", "")
        return self.public

    def get_access_url(self, bucket: str, path: str) -> str:
        return f"http://{bucket}.test/{norm_path(path)}"

    def get_access_url_with_token(self, bucket: str, path: str, expire: int) -> str:
        return f"http://{bucket}.test/{norm_path(path)}?sign=token{expire}"

    def download(self, url: str, dest: Path) -> int:
        key = url.split(".test/", 1)[1].split("?", 1)[0]
        self._record("download", key)
        data = self.files[key]
        Path(dest).write_bytes(data)
        return len(data)


@pytest.fixture
def cos_config() -> CosConfig:
    """Client configuration pointing at http://test."""
    return make_cos_config()


@pytest.fixture
def fake_client() -> FakeCosClient:
    """Empty in-memory storage service."""
    return FakeCosClient()
