from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable

from application.ports.metadata_provider_port import MetadataProviderPort
from domain.catalog.categories import SearchScope
from domain.catalog.search import SearchResults
from domain.catalog.selection import has_poster, has_profile
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)


async def run_search(provider: MetadataProviderPort, query: str, scope: SearchScope) -> SearchResults:
    """Dispatch the per-type searches a scope implies, concurrently.

    Titles without a poster and people without a profile image are dropped;
    a blank query returns empty results without calling the provider.
    """
    q = (query or "").strip()
    if not q:
        return SearchResults(query=q, scope=scope)

    calls: dict[str, Awaitable[Any]] = {}
    if scope.includes_titles:
        calls["movies"] = provider.search_movies(q)
        calls["tv_shows"] = provider.search_tv(q)
    if scope.includes_people:
        calls["people"] = provider.search_people(q)

    pages = dict(zip(calls, await asyncio.gather(*calls.values())))

    movies = pages.get("movies")
    tv_shows = pages.get("tv_shows")
    people = pages.get("people")
    return SearchResults(
        query=q,
        scope=scope,
        movies=tuple(m for m in movies.items if has_poster(m)) if movies else (),
        tv_shows=tuple(t for t in tv_shows.items if has_poster(t)) if tv_shows else (),
        people=tuple(p for p in people.items if has_profile(p)) if people else (),
    )


class SearchService:
    def __init__(self, provider: MetadataProviderPort) -> None:
        self._provider = provider

    async def search(self, query: str, scope: SearchScope | str | None = None) -> SearchResults:
        resolved = scope if isinstance(scope, SearchScope) else SearchScope.parse(scope)
        results = await run_search(self._provider, query, resolved)
        logger.info(
            "search %s",
            format_kv(
                scope=resolved,
                query=results.query,
                movies=len(results.movies),
                tv=len(results.tv_shows),
                people=len(results.people),
            ),
        )
        return results
