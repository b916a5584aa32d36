from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, TypeVar

from ..exceptions import FetchError
from .client import HarborClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOTAL_COUNT_HEADER = "x-total-count"


@dataclass
class PageCursor:
    page_number: int
    page_size: int
    total_count: Optional[int] = None

    def query(self, path: str) -> str:
        separator = "&" if "?" in path else "?"
        return f"{path}{separator}page={self.page_number}&page_size={self.page_size}"

    def exhausted(self) -> bool:
        if self.total_count is None:
            return True
        return self.page_number * self.page_size >= self.total_count


class PagedFetcher:
    """Drains a paginated Harbor listing, one page at a time.

    Pages are requested strictly in order. Any failing page fails the whole
    fetch and nothing collected so far is returned.
    """

    def __init__(self, client: HarborClient, page_size: int) -> None:
        self.client = client
        self.page_size = page_size

    async def fetch_all(self, path: str, decode: Callable[[bytes], List[T]]) -> List[List[T]]:
        cursor = PageCursor(page_number=1, page_size=self.page_size)
        pages: List[List[T]] = []
        while True:
            page_path = cursor.query(path)
            body, headers = await self.client.fetch(page_path)
            page = decode(body)
            pages.append(page)

            count = headers.get(TOTAL_COUNT_HEADER)
            if count is None or count == "":
                break
            try:
                cursor.total_count = int(count)
            except ValueError as exc:
                raise FetchError(
                    f"malformed {TOTAL_COUNT_HEADER} header {count!r} for {page_path}", page_path
                ) from exc

            if not page or cursor.exhausted():
                break
            cursor.page_number += 1

        logger.debug("Fetched %d page(s) of %s", len(pages), path)
        return pages

    async def fetch_items(self, path: str, decode: Callable[[bytes], List[T]]) -> List[T]:
        """Like ``fetch_all`` but flattened into one list of records."""
        pages = await self.fetch_all(path, decode)
        return [item for page in pages for item in page]
