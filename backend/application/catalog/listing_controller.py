"""Infinite-scroll state machine for one listing page.

IDLE -> LOADING -> READY -> LOADING_MORE -> READY -> ... -> EXHAUSTED

A listing session starts with ``start()`` (or ``search()``) and owns a
``CancellationToken``; results that resolve after the session was replaced
or closed are dropped without touching the state. ``load_more`` switches
the phase to LOADING_MORE before its first await, so overlapping scroll
events never fetch the same page twice.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Generic, Iterable, Optional, TypeVar

from application.common.cancellation import CancellationToken
from domain.catalog.listing import ListingPhase, ListingState, ScrollPosition
from domain.catalog.media_item import PaginatedResult
from domain.errors import ProviderError
from infrastructure.config.settings import SCROLL_THRESHOLD_PX
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)

T = TypeVar("T")

FetchPage = Callable[[int], Awaitable[PaginatedResult[T]]]
SearchFn = Callable[[str], Awaitable[PaginatedResult[T]]]
ItemFilter = Callable[[T], bool]


class ListingController(Generic[T]):
    def __init__(
        self,
        fetch_page: FetchPage,
        *,
        item_filter: Optional[ItemFilter] = None,
        search_fn: Optional[SearchFn] = None,
        scroll_threshold: float | None = None,
        name: str = "listing",
    ) -> None:
        self._fetch_page = fetch_page
        self._item_filter = item_filter
        self._search_fn = search_fn
        self._threshold = float(SCROLL_THRESHOLD_PX if scroll_threshold is None else scroll_threshold)
        self._name = name
        self._token = CancellationToken()
        self.state: ListingState[T] = ListingState()

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._token.cancelled

    def _filter(self, items: Iterable[T]) -> list[T]:
        if self._item_filter is None:
            return list(items)
        return [it for it in items if self._item_filter(it)]

    def _new_session(self, *, search_mode: bool) -> CancellationToken:
        self._token.cancel()
        self._token = CancellationToken()
        self.state = ListingState(phase=ListingPhase.LOADING, search_mode=search_mode)
        return self._token

    async def start(self) -> ListingState[T]:
        """Begin a fresh session and load page 1."""
        token = self._new_session(search_mode=False)
        try:
            page = await self._fetch_page(1)
        except ProviderError as exc:
            if token.cancelled:
                return self.state
            logger.warning("listing initial fetch failed %s", format_kv(listing=self._name, error=str(exc)))
            self.state = ListingState(phase=ListingPhase.FAILED, error=str(exc))
            return self.state

        if token.cancelled:
            return self.state

        # has_more follows the provider's page metadata, not the filtered count.
        has_more = not page.is_empty and page.has_more
        self.state = ListingState(
            items=self._filter(page.items),
            current_page=page.page,
            has_more=has_more,
            phase=ListingPhase.READY if has_more else ListingPhase.EXHAUSTED,
        )
        logger.debug(
            "listing started %s",
            format_kv(listing=self._name, page=page.page, total_pages=page.total_pages, items=len(self.state.items)),
        )
        return self.state

    def should_load_more(self, position: ScrollPosition) -> bool:
        state = self.state
        return (
            position.near_bottom(self._threshold)
            and state.has_more
            and state.phase is ListingPhase.READY
            and not state.search_mode
        )

    async def on_scroll(self, position: ScrollPosition) -> bool:
        if not self.should_load_more(position):
            return False
        return await self.load_more()

    async def load_more(self) -> bool:
        """Fetch and append the next page; returns True when a page was committed."""
        state = self.state
        if state.phase is not ListingPhase.READY or not state.has_more or state.search_mode:
            return False

        token = self._token
        state.phase = ListingPhase.LOADING_MORE
        next_page = state.current_page + 1
        try:
            page = await self._fetch_page(next_page)
        except ProviderError as exc:
            if token.cancelled:
                return False
            logger.warning(
                "listing load_more failed %s",
                format_kv(listing=self._name, page=next_page, error=str(exc)),
            )
            state.phase = ListingPhase.READY
            state.error = str(exc)
            return False

        if token.cancelled:
            return False

        state.error = None
        if page.is_empty:
            state.has_more = False
            state.phase = ListingPhase.EXHAUSTED
            return False

        state.items.extend(self._filter(page.items))
        state.current_page = page.page
        state.has_more = page.has_more
        state.phase = ListingPhase.READY if state.has_more else ListingPhase.EXHAUSTED
        logger.debug(
            "listing page appended %s",
            format_kv(listing=self._name, page=page.page, total_pages=page.total_pages, items=len(state.items)),
        )
        return True

    async def search(self, query: str, search_fn: Optional[SearchFn] = None) -> ListingState[T]:
        """Replace the listing with one final page of search results.

        A blank query restarts the normal listing.
        """
        q = (query or "").strip()
        if not q:
            return await self.start()

        fn = search_fn or self._search_fn
        if fn is None:
            raise ValueError(f"listing {self._name!r} has no search function")

        token = self._new_session(search_mode=True)
        try:
            page = await fn(q)
        except ProviderError as exc:
            if token.cancelled:
                return self.state
            logger.warning("listing search failed %s", format_kv(listing=self._name, query=q, error=str(exc)))
            self.state = ListingState(phase=ListingPhase.FAILED, search_mode=True, error=str(exc))
            return self.state

        if token.cancelled:
            return self.state

        self.state = ListingState(
            items=self._filter(page.items),
            current_page=page.page,
            has_more=False,
            phase=ListingPhase.READY,
            search_mode=True,
        )
        return self.state

    def close(self) -> None:
        """End the session; in-flight results are discarded."""
        self._token.cancel()
