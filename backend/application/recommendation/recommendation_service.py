"""Recommendations for a title detail page.

Movies use a fallback chain:

1. personalized: genres of the user's most recent watchlist movies drive a
   discover query (quality floor on vote count/average), excluding the
   current movie and everything already on the watchlist;
2. provider: TMDB's own recommendations for the movie;
3. empty set flagged ``failed`` when the provider call fails too.

Both lists drop titles without a poster before the limit applies.

Nothing here raises; the view renders whatever set comes back.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from application.common.cancellation import CancellationToken
from application.ports.metadata_provider_port import MetadataProviderPort
from application.ports.watchlist_store_port import WatchlistStorePort
from domain.catalog import MediaItem
from domain.catalog.selection import has_poster
from domain.errors import CineScopeError
from domain.recommendation import RecommendationPolicy, RecommendationSet
from infrastructure.config.settings import (
    RECOMMENDATION_LIMIT,
    RECOMMENDATION_MAX_GENRES,
    RECOMMENDATION_MIN_VOTE_AVERAGE,
    RECOMMENDATION_MIN_VOTE_COUNT,
    RECOMMENDATION_WATCHLIST_SAMPLE,
)
from infrastructure.utils import EventLogger

logger = logging.getLogger(__name__)


def default_policy() -> RecommendationPolicy:
    return RecommendationPolicy(
        watchlist_sample=RECOMMENDATION_WATCHLIST_SAMPLE,
        max_genres=RECOMMENDATION_MAX_GENRES,
        limit=RECOMMENDATION_LIMIT,
        min_vote_count=RECOMMENDATION_MIN_VOTE_COUNT or 0,
        min_vote_average=RECOMMENDATION_MIN_VOTE_AVERAGE or 0.0,
    )


class RecommendationService:
    def __init__(
        self,
        provider: MetadataProviderPort,
        watchlist: Optional[WatchlistStorePort] = None,
        *,
        policy: Optional[RecommendationPolicy] = None,
    ) -> None:
        self._provider = provider
        self._watchlist = watchlist
        self._policy = policy or default_policy()

    @property
    def policy(self) -> RecommendationPolicy:
        return self._policy

    async def _affinity_genres(self, movie_ids: list[int], flow: EventLogger) -> list[int]:
        results = await asyncio.gather(
            *(self._provider.fetch_detail("movie", mid) for mid in movie_ids),
            return_exceptions=True,
        )
        genres: list[int] = []
        for mid, result in zip(movie_ids, results):
            if isinstance(result, CineScopeError):
                flow.warning("detail_failed", watchlist_movie_id=mid, error=str(result))
                continue
            if isinstance(result, BaseException):
                raise result
            for gid in result.genre_ids:
                if gid not in genres:
                    genres.append(gid)
        return genres[: self._policy.max_genres]

    async def _personalized(
        self,
        movie_id: int,
        user_id: str,
        flow: EventLogger,
        token: Optional[CancellationToken],
    ) -> tuple[MediaItem, ...]:
        if self._watchlist is None:
            return ()
        entries = await self._watchlist.list_entries(user_id=user_id)
        if not entries:
            flow.debug("watchlist_empty")
            return ()
        if token is not None and token.cancelled:
            return ()

        sample = [e.movie_id for e in entries[: self._policy.watchlist_sample]]
        genres = await self._affinity_genres(sample, flow)
        flow.debug("affinity_genres", sampled=len(sample), genres=genres)
        if not genres:
            return ()
        if token is not None and token.cancelled:
            return ()

        discovered = await self._provider.discover_movies(
            genre_ids=genres,
            min_vote_count=self._policy.min_vote_count,
            min_vote_average=self._policy.min_vote_average,
        )
        excluded = {int(movie_id)} | {e.movie_id for e in entries}
        picked = [m for m in discovered.items if m.id not in excluded and has_poster(m)]
        return tuple(picked[: self._policy.limit])

    async def _from_provider(self, media_type: str, media_id: int, flow: EventLogger) -> RecommendationSet:
        try:
            page = await self._provider.fetch_recommendations(media_type, media_id)
        except CineScopeError as exc:
            flow.warning("provider_failed", error=str(exc))
            return RecommendationSet(failed=True)
        except Exception:
            # Last link of the chain; the view always gets a set back.
            flow.exception("provider_failed")
            return RecommendationSet(failed=True)
        items = tuple(m for m in page.items if has_poster(m))[: self._policy.limit]
        flow.info("provider", count=len(items))
        return RecommendationSet(items=items, source="provider" if items else "none")

    async def recommend_for_movie(
        self,
        movie_id: int,
        user_id: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> RecommendationSet:
        flow = EventLogger(logger, "[recommendations]", base_fields={"movie_id": movie_id, "user_id": user_id})
        if user_id:
            try:
                items = await self._personalized(int(movie_id), user_id, flow, token)
            except CineScopeError as exc:
                flow.warning("personalized_failed", error=str(exc))
                items = ()
            if items:
                flow.info("personalized", count=len(items))
                return RecommendationSet(items=items, source="personalized")
        if token is not None and token.cancelled:
            flow.debug("cancelled")
            return RecommendationSet()
        return await self._from_provider("movie", int(movie_id), flow)

    async def recommend_for_tv(self, tv_id: int, token: Optional[CancellationToken] = None) -> RecommendationSet:
        flow = EventLogger(logger, "[recommendations]", base_fields={"tv_id": tv_id})
        if token is not None and token.cancelled:
            return RecommendationSet()
        return await self._from_provider("tv", int(tv_id), flow)
