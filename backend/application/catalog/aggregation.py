from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from domain.catalog.media_item import PaginatedResult
from domain.catalog.selection import rank_items

T = TypeVar("T")


async def merge_pages(
    fetch_page: Callable[[int], Awaitable[PaginatedResult[T]]],
    pages: int,
    limit: Optional[int] = None,
    item_filter: Optional[Callable[[T], bool]] = None,
) -> list[T]:
    """Fetch pages 1..N together and flatten them in page order.

    A single failed page aborts the whole merge.
    """
    if pages < 1:
        return []
    results = await asyncio.gather(*(fetch_page(p) for p in range(1, pages + 1)))
    merged: list[T] = []
    for result in results:
        for item in result.items:
            if item_filter is None or item_filter(item):
                merged.append(item)
    return merged[:limit] if limit is not None else merged


__all__ = ["merge_pages", "rank_items"]
