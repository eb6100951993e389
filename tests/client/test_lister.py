"""Tests for the paginated lister."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from cossync.client.api import ListResult, PathIsFileError, ProtocolError, TransportError
from cossync.client.sync.lister import Lister
from tests.conftest import FakeCosClient


def page(infos: list[dict], has_more: bool, context: str | None = None) -> ListResult:
    """Build a successful ListResult."""
    return ListResult(
        http_status=200, code=0, message="SUCCESS", infos=infos, has_more=has_more, context=context
    )


class TestLister:
    """Tests for Lister."""

    def test_round_trips_cursor(self) -> None:
        """Should pass each page's cursor verbatim to the next call."""
        client = MagicMock()
        client.list_dir.side_effect = [
            page([{"name": "a"}], True, "opaque+/="),
            page([{"name": "b", "sha": "1"}], False),
        ]

        pages = list(Lister(client, page_size=1).pages("bkt", "root"))

        assert [p.has_more for p in pages] == [True, False]
        contexts = [c.args[5] for c in client.list_dir.call_args_list]
        assert contexts == [None, "opaque+/="]

    def test_entries_paths(self) -> None:
        """Should build entry paths from the parent path and name."""
        client = FakeCosClient()
        client.add_dir("root/sub")
        for name in ("a", "b", "c"):
            client.add_file(f"root/{name}.txt")

        entries = list(Lister(client, page_size=2).entries("bkt", "root"))

        assert [e.path for e in entries] == [
            "root/sub",
            "root/a.txt",
            "root/b.txt",
            "root/c.txt",
        ]
        assert entries[0].is_directory
        assert not entries[1].is_directory
        assert len(client.ops("list")) == 2

    def test_no_omission_or_duplication(self) -> None:
        """Should return every entry exactly once across pages."""
        client = FakeCosClient()
        names = [f"f{i:02d}" for i in range(11)]
        for name in names:
            client.add_file(f"d/{name}")

        entries = list(Lister(client, page_size=3).entries("bkt", "d"))

        assert [e.name for e in entries] == names
        assert len(client.ops("list")) == 4

    def test_path_is_file(self) -> None:
        """Should raise PathIsFileError on -166."""
        client = FakeCosClient()
        client.add_file("a.txt")

        with pytest.raises(PathIsFileError):
            list(Lister(client).pages("bkt", "a.txt"))

    def test_missing_cursor(self) -> None:
        """Should refuse to loop when more pages are announced without a cursor."""
        client = MagicMock()
        client.list_dir.return_value = page([], True, None)

        with pytest.raises(ProtocolError):
            list(Lister(client).pages("bkt", "root"))

    def test_malformed_entry(self) -> None:
        """Should raise TransportError for a non-numeric entry size."""
        client = MagicMock()
        client.list_dir.return_value = page([{"name": "a", "sha": "1", "filesize": "big"}], False)

        with pytest.raises(TransportError):
            list(Lister(client).pages("bkt", "root"))
