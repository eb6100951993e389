"""Cursor-driven listing of a remote folder.

This module provides:
- Lister: Turns the page-at-a-time list primitive into a sequence of pages
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from cossync.client.api import DEFAULT_LIST_NUM, ListPattern, ProtocolError, TransportError
from cossync.client.sync.types import ListPage, RemoteEntry
from cossync.core.paths import join

if TYPE_CHECKING:
    from cossync.client.api import CosClient

logger = logging.getLogger(__name__)


class Lister:
    """Paginated listing over a CosClient.

    Pages are fetched strictly one after another: the next request is only
    issued with the cursor returned by the previous page.
    """

    def __init__(self, client: CosClient, page_size: int = DEFAULT_LIST_NUM) -> None:
        self._client = client
        self._page_size = page_size

    def pages(
        self,
        bucket: str,
        path: str,
        pattern: ListPattern = ListPattern.BOTH,
        order: int = 0,
        context: str | None = None,
    ) -> Iterator[ListPage]:
        """Yield the pages of a folder listing until ``has_more`` is false.

        Args:
            bucket: Bucket name.
            path: Folder path; entry paths are built as ``path + "/" + name``.
            pattern: Which entries to list.
            order: 0 for ascending, 1 for descending.
            context: Cursor to resume from (None starts at the beginning).

        Raises:
            PathIsFileError: If ``path`` is a file.
            RemoteError: On any other nonzero code.
            ProtocolError: If a page claims more results without a cursor.
            TransportError: If an entry field has the wrong type.
        """
        while True:
            result = self._client.list_dir(
                bucket, path, self._page_size, pattern, order, context
            ).raise_for_code()
            try:
                entries = [
                    RemoteEntry.from_info(info, join(path, str(info.get("name", ""))))
                    for info in result.infos
                ]
            except (TypeError, ValueError) as e:
                raise TransportError(
                    f"Malformed entry in listing of {path}: {e}", result.http_status
                ) from e
            page = ListPage(entries=entries, has_more=result.has_more, context=result.context)
            logger.debug(f"Listed {len(entries)} entries of {path} (more: {page.has_more})")
            yield page
            if not page.has_more:
                return
            if not page.context:
                raise ProtocolError(f"Listing of {path} has more pages but no cursor")
            context = page.context

    def entries(
        self,
        bucket: str,
        path: str,
        pattern: ListPattern = ListPattern.BOTH,
        order: int = 0,
    ) -> Iterator[RemoteEntry]:
        """Yield every entry of a folder across all pages."""
        for page in self.pages(bucket, path, pattern, order):
            yield from page.entries
