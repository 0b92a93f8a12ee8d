"""
TMDB API HTTP client for the catalog.

Every read goes through ``_get_json``, which owns session handling, auth and
error mapping. Payloads are validated with the pydantic models in
``infrastructure.metadata.schemas`` and returned as domain types.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Sequence, Type, TypeVar

import aiohttp
from pydantic import ValidationError

from application.catalog.search_service import run_search
from application.ports.metadata_provider_port import MetadataProviderPort
from domain.catalog.categories import ListingCategory, SearchScope
from domain.catalog.detail import CastMember, Genre, MediaDetail, PersonDetail, RegionProviders, Video
from domain.catalog.media_item import MEDIA_TYPES, MediaItem, PaginatedResult, Person
from domain.catalog.search import SearchResults
from domain.errors import ProviderError
from domain.memory.review import ProviderReview
from infrastructure.config.settings import (
    IMAGE_PLACEHOLDER,
    TMDB_API_KEY,
    TMDB_API_TOKEN,
    TMDB_BASE_URL,
    TMDB_IMAGE_BASE_URL,
    TMDB_LANGUAGE,
    TMDB_TIMEOUT_S,
)
from infrastructure.metadata.schemas import (
    TmdbCredits,
    TmdbGenreList,
    TmdbMediaDetail,
    TmdbMediaResult,
    TmdbModel,
    TmdbPage,
    TmdbPersonDetail,
    TmdbPersonMovieCredits,
    TmdbPersonResult,
    TmdbReviewList,
    TmdbVideoList,
    TmdbWatchProviders,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=TmdbModel)


def build_image_url(
    path: Optional[str],
    size: str = "w500",
    *,
    base_url: str = TMDB_IMAGE_BASE_URL,
    placeholder: str = IMAGE_PLACEHOLDER,
) -> str:
    """Image CDN url for a TMDB file path; missing paths map to the placeholder."""
    p = (path or "").strip()
    if not p:
        return placeholder
    if not p.startswith("/"):
        p = "/" + p
    return f"{base_url.rstrip('/')}/{size}{p}"


def _check_media_type(media_type: str) -> str:
    if media_type not in MEDIA_TYPES:
        raise ValueError(f"unsupported media_type={media_type!r}")
    return media_type


class TMDBClient(MetadataProviderPort):
    """Async HTTP client for the TMDB v3 API.

    The aiohttp session is created lazily (double-checked under an asyncio
    lock) and reused until ``close()``. Any failure, including a missing
    configuration, surfaces as ``ProviderError``.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_token: str | None = None,
        api_key: str | None = None,
        timeout_s: float | None = None,
        language: str | None = None,
        image_base_url: str | None = None,
        placeholder: str | None = None,
    ) -> None:
        self._base_url = (base_url or TMDB_BASE_URL or "").rstrip("/")
        self._api_token = (api_token or TMDB_API_TOKEN or "").strip()
        self._api_key = (api_key or TMDB_API_KEY or "").strip()
        self._timeout_s = float(timeout_s or TMDB_TIMEOUT_S or 10.0)
        self._language = (language or TMDB_LANGUAGE or "en-US").strip()
        self._image_base_url = (image_base_url or TMDB_IMAGE_BASE_URL).rstrip("/")
        self._placeholder = placeholder or IMAGE_PLACEHOLDER
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self._base_url and (self._api_token or self._api_key))

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json"}
        # Prefer v4 bearer token auth when available.
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    def _auth_params(self) -> dict[str, str]:
        """v3 auth via api_key query param (used when bearer token is absent)."""
        if self._api_token:
            return {}
        if self._api_key:
            return {"api_key": self._api_key}
        return {}

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None and not self._session.closed:
            return self._session

        async with self._lock:
            if self._session is not None and not self._session.closed:
                return self._session

            timeout = aiohttp.ClientTimeout(total=self._timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            return self._session

    async def _get_json(self, path: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        if not self.configured:
            logger.warning("TMDB client not configured (missing base_url or auth)")
            raise ProviderError("TMDB client not configured", endpoint=path)

        # Direct concatenation: urljoin would eat the /3 version prefix.
        url = f"{self._base_url}{path}"
        query: dict[str, Any] = {"language": self._language}
        query.update(params or {})
        query.update(self._auth_params())

        logger.debug("TMDB GET url=%s params=%s", url, {k: v for k, v in query.items() if k != "api_key"})

        try:
            session = await self._get_session()
            async with session.get(url, params=query, headers=self._headers()) as resp:
                if resp.status >= 400:
                    error_text = await resp.text()
                    logger.error("TMDB request failed (%s) path=%s: %s", resp.status, path, error_text[:200])
                    raise ProviderError(
                        f"TMDB request failed with HTTP {resp.status}",
                        status=resp.status,
                        endpoint=path,
                    )
                try:
                    data = await resp.json(content_type=None)
                except ValueError as exc:
                    raise ProviderError("TMDB returned a non-JSON body", status=resp.status, endpoint=path) from exc
        except asyncio.TimeoutError as exc:
            logger.error("TMDB timeout after %ss path=%s", self._timeout_s, path)
            raise ProviderError(f"TMDB timeout after {self._timeout_s}s", endpoint=path) from exc
        except aiohttp.ClientError as exc:
            logger.error("TMDB transport error path=%s: %s", path, exc)
            raise ProviderError(f"TMDB transport error: {exc}", endpoint=path) from exc

        if not isinstance(data, dict):
            raise ProviderError("TMDB returned an unexpected payload", endpoint=path)
        return data

    async def _get_model(self, model: Type[M], path: str, params: Mapping[str, Any] | None = None) -> M:
        data = await self._get_json(path, params)
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("TMDB payload did not validate path=%s: %s", path, exc.errors()[:3])
            raise ProviderError("TMDB payload failed validation", endpoint=path) from exc

    async def _get_media_page(
        self,
        path: str,
        media_type: str,
        params: Mapping[str, Any] | None = None,
    ) -> PaginatedResult[MediaItem]:
        page = await self._get_model(TmdbPage, path, params)
        try:
            items = tuple(TmdbMediaResult.model_validate(r).to_media_item(media_type) for r in page.results)
        except ValidationError as exc:
            logger.error("TMDB result row did not validate path=%s: %s", path, exc.errors()[:3])
            raise ProviderError("TMDB result row failed validation", endpoint=path) from exc
        return PaginatedResult(
            items=items,
            page=page.page,
            total_pages=page.normalized_total_pages,
            total_results=page.total_results,
        )

    async def _get_people_page(self, path: str, params: Mapping[str, Any] | None = None) -> PaginatedResult[Person]:
        page = await self._get_model(TmdbPage, path, params)
        try:
            items = tuple(TmdbPersonResult.model_validate(r).to_person() for r in page.results)
        except ValidationError as exc:
            logger.error("TMDB person row did not validate path=%s: %s", path, exc.errors()[:3])
            raise ProviderError("TMDB person row failed validation", endpoint=path) from exc
        return PaginatedResult(
            items=items,
            page=page.page,
            total_pages=page.normalized_total_pages,
            total_results=page.total_results,
        )

    # ===== Listings =====

    async def fetch_listing(self, category: ListingCategory, page: int = 1) -> PaginatedResult[MediaItem]:
        category = ListingCategory(category)
        params = {"page": int(page)} if category.paginated else {}
        return await self._get_media_page(category.path, category.media_type, params)

    async def fetch_by_genre(
        self,
        genre_id: int,
        media_type: str = "movie",
        page: int = 1,
    ) -> PaginatedResult[MediaItem]:
        media_type = _check_media_type(media_type)
        params: dict[str, Any] = {"with_genres": str(int(genre_id)), "page": int(page)}
        if media_type == "movie":
            params["sort_by"] = "popularity.desc"
        return await self._get_media_page(f"/discover/{media_type}", media_type, params)

    async def discover_movies(
        self,
        *,
        genre_ids: Sequence[int],
        min_vote_count: int | None = None,
        min_vote_average: float | None = None,
        page: int = 1,
    ) -> PaginatedResult[MediaItem]:
        params: dict[str, Any] = {
            "sort_by": "popularity.desc",
            "include_adult": "false",
            "page": int(page),
        }
        if genre_ids:
            # Comma-joined: TMDB matches titles carrying all listed genres.
            params["with_genres"] = ",".join(str(int(g)) for g in genre_ids)
        if min_vote_count is not None:
            params["vote_count.gte"] = int(min_vote_count)
        if min_vote_average is not None:
            params["vote_average.gte"] = float(min_vote_average)
        return await self._get_media_page("/discover/movie", "movie", params)

    # ===== Search =====

    async def search_movies(self, query: str) -> PaginatedResult[MediaItem]:
        return await self._get_media_page("/search/movie", "movie", {"query": query, "page": 1})

    async def search_tv(self, query: str) -> PaginatedResult[MediaItem]:
        return await self._get_media_page("/search/tv", "tv", {"query": query, "page": 1})

    async def search_people(self, query: str) -> PaginatedResult[Person]:
        return await self._get_people_page("/search/person", {"query": query, "page": 1})

    async def search(self, query: str, scope: SearchScope | str = SearchScope.ALL) -> SearchResults:
        return await run_search(self, query, SearchScope.parse(scope))

    # ===== Titles =====

    async def fetch_detail(self, media_type: str, media_id: int) -> MediaDetail:
        media_type = _check_media_type(media_type)
        path = f"/{media_type}/{int(media_id)}"
        detail = await self._get_model(TmdbMediaDetail, path)
        return detail.to_detail(media_type)

    async def fetch_recommendations(self, media_type: str, media_id: int) -> PaginatedResult[MediaItem]:
        media_type = _check_media_type(media_type)
        return await self._get_media_page(f"/{media_type}/{int(media_id)}/recommendations", media_type)

    async def fetch_similar(self, media_type: str, media_id: int) -> PaginatedResult[MediaItem]:
        media_type = _check_media_type(media_type)
        return await self._get_media_page(f"/{media_type}/{int(media_id)}/similar", media_type)

    async def fetch_credits(self, media_type: str, media_id: int) -> list[CastMember]:
        media_type = _check_media_type(media_type)
        credits = await self._get_model(TmdbCredits, f"/{media_type}/{int(media_id)}/credits")
        cast = [c.to_cast_member() for c in credits.cast]
        cast.sort(key=lambda c: c.order)
        return cast

    async def fetch_videos(self, media_type: str, media_id: int) -> list[Video]:
        media_type = _check_media_type(media_type)
        videos = await self._get_model(TmdbVideoList, f"/{media_type}/{int(media_id)}/videos")
        return [v.to_video() for v in videos.results]

    async def fetch_reviews(self, media_type: str, media_id: int) -> list[ProviderReview]:
        media_type = _check_media_type(media_type)
        reviews = await self._get_model(TmdbReviewList, f"/{media_type}/{int(media_id)}/reviews")
        return [r.to_review() for r in reviews.results]

    async def fetch_watch_providers(self, media_type: str, media_id: int) -> dict[str, RegionProviders]:
        media_type = _check_media_type(media_type)
        # Watch providers are not localized; the language param is harmless.
        providers = await self._get_model(TmdbWatchProviders, f"/{media_type}/{int(media_id)}/watch/providers")
        return {region: entry.to_region() for region, entry in providers.results.items()}

    # ===== People =====

    async def fetch_popular_people(self, page: int = 1) -> PaginatedResult[Person]:
        return await self._get_people_page("/person/popular", {"page": int(page)})

    async def fetch_person(self, person_id: int) -> PersonDetail:
        person = await self._get_model(TmdbPersonDetail, f"/person/{int(person_id)}")
        return person.to_detail()

    async def fetch_person_movie_credits(self, person_id: int) -> list[MediaItem]:
        credits = await self._get_model(TmdbPersonMovieCredits, f"/person/{int(person_id)}/movie_credits")
        return [c.to_media_item("movie") for c in credits.cast]

    # ===== Genres / images =====

    async def fetch_genres(self, media_type: str = "movie") -> list[Genre]:
        media_type = _check_media_type(media_type)
        genres = await self._get_model(TmdbGenreList, f"/genre/{media_type}/list")
        return [g.to_genre() for g in genres.genres]

    def image_url(self, path: Optional[str], size: str = "w500") -> str:
        return build_image_url(path, size, base_url=self._image_base_url, placeholder=self._placeholder)

    async def close(self) -> None:
        """Close the HTTP session; the next request opens a new one."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


__all__ = ["TMDBClient", "build_image_url"]
