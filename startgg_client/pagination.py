from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Hashable, Sequence
from typing import Any, Final, Generic, TypeVar

log: Final = logging.getLogger("startgg-client")

T = TypeVar("T")

DEFAULT_WINDOW_PAGES: Final = 20

PageFetcher = Callable[[int], Awaitable[tuple[Sequence[T], int]]]


async def iter_pages(fetch_page: PageFetcher[T]) -> AsyncIterator[list[T]]:
    """Yield each page of items in order, one request at a time.

    The page count is only known once page 1 has been fetched, so the loop
    condition is checked after every request.
    """
    page = 1
    while True:
        items, total_pages = await fetch_page(page)
        yield list(items)
        page += 1
        if page > total_pages:
            break


async def paginate(fetch_page: PageFetcher[T]) -> list[T]:
    collected: list[T] = []
    async for items in iter_pages(fetch_page):
        collected.extend(items)
    return collected


class WatermarkPaginator(Generic[T]):
    """Walk a growing, key-ordered listing in fixed windows of pages.

    ``fetch_page(page, watermark)`` must return items ordered by ``key`` and
    restricted to keys at or after ``watermark``. After ``window_pages`` pages
    the trailing run of items sharing the last key is recorded as seen and the
    next pass restarts at page 1 from that key. Seen items are never yielded
    again.
    """

    def __init__(
        self,
        fetch_page: Callable[[int, Any], Awaitable[tuple[Sequence[T], int]]],
        *,
        key: Callable[[T], Any],
        identity: Callable[[T], Hashable],
        window_pages: int = DEFAULT_WINDOW_PAGES,
        watermark: Any = None,
    ) -> None:
        if window_pages < 1:
            raise ValueError("window_pages must be at least 1")
        self._fetch_page = fetch_page
        self._key = key
        self._identity = identity
        self._window_pages = window_pages
        self._seen: dict[Hashable, Any] = {}
        self.watermark = watermark
        self.passes = 0

    @property
    def seen(self) -> set[Hashable]:
        return set(self._seen)

    def is_seen(self, item: T) -> bool:
        return self._identity(item) in self._seen

    async def __aiter__(self) -> AsyncIterator[T]:
        page = 1
        pass_start = 1
        self.passes = 1
        run_key: Any = None
        run: list[Hashable] = []
        while True:
            log.info("Listing page %d (watermark %s)", page, self.watermark)
            items, total_pages = await self._fetch_page(page, self.watermark)
            for item in items:
                item_key = self._key(item)
                if not run or item_key != run_key:
                    run_key = item_key
                    run = []
                run.append(self._identity(item))
                if self.is_seen(item):
                    continue
                self._seen[self._identity(item)] = item_key
                yield item

            if page + 1 > total_pages:
                return
            if page - pass_start + 1 < self._window_pages or not run:
                page += 1
                continue

            if self._rebase(run_key, run):
                page = pass_start = 1
            else:
                # A whole window shares one key; keep paging past it.
                page = pass_start = page + 1
            run_key = None
            run = []
            self.passes += 1

    def _rebase(self, boundary_key: Any, boundary: list[Hashable]) -> bool:
        """Record the boundary run as seen; return whether the watermark moved."""
        for identity in boundary:
            self._seen[identity] = boundary_key
        if self.watermark is not None and boundary_key == self.watermark:
            log.info("Watermark %s did not advance", boundary_key)
            return False
        self._seen = {
            identity: key
            for identity, key in self._seen.items()
            if not key < boundary_key
        }
        self.watermark = boundary_key
        log.info(
            "Re-based listing at %s with %d boundary items", boundary_key, len(boundary)
        )
        return True


__all__ = ["DEFAULT_WINDOW_PAGES", "WatermarkPaginator", "iter_pages", "paginate"]
