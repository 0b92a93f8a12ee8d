"""Page-level fan-outs over the metadata provider.

Each method issues its independent fetches together and returns a plain
dataclass; one failed fetch fails the page (``ProviderError``) unless the
method says otherwise.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Optional

from application.catalog.aggregation import merge_pages
from application.catalog.listing_controller import ListingController
from application.catalog.search_service import SearchService
from application.ports.metadata_provider_port import MetadataProviderPort
from domain.catalog import (
    CastMember,
    Genre,
    ListingCategory,
    MediaDetail,
    MediaItem,
    Person,
    PersonDetail,
    RankedItem,
    Video,
    WatchProvider,
)
from domain.catalog.selection import (
    dedupe_providers,
    has_poster,
    has_profile,
    pick_region,
    pick_trailer,
    rank_items,
    sort_by_popularity,
)
from domain.config.genre_catalog import list_genres
from domain.errors import ProviderError
from domain.memory import ProviderReview
from infrastructure.config.settings import LARGE_LIST_LIMIT, LARGE_LIST_PAGES, SCROLL_THRESHOLD_PX
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)

HOME_TRENDING = 6
HOME_POPULAR = 12
TITLE_REVIEWS = 5
TITLE_CAST = 10
TITLE_SIMILAR = 6
ACTOR_CREDITS = 20
SHOWCASE_IMAGE_SIZE = "w780"


@dataclass(frozen=True)
class HomePage:
    trending: tuple[MediaItem, ...]
    popular: tuple[MediaItem, ...]


@dataclass(frozen=True)
class TitlePage:
    detail: MediaDetail
    reviews: tuple[ProviderReview, ...]
    cast: tuple[CastMember, ...]
    similar: tuple[MediaItem, ...]
    trailer: Optional[Video] = None


@dataclass(frozen=True)
class ActorPage:
    detail: PersonDetail
    credits: tuple[MediaItem, ...]


@dataclass(frozen=True)
class GenreTile:
    genre: Genre
    # None when the genre's discover call failed or returned nothing.
    image_url: Optional[str] = None


@dataclass(frozen=True)
class WatchProvidersView:
    region: str
    regions: tuple[str, ...]
    link: Optional[str] = None
    flatrate: tuple[WatchProvider, ...] = ()
    buy: tuple[WatchProvider, ...] = ()
    rent: tuple[WatchProvider, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.flatrate or self.buy or self.rent)


class CatalogService:
    def __init__(
        self,
        provider: MetadataProviderPort,
        *,
        large_list_pages: int = LARGE_LIST_PAGES,
        large_list_limit: int = LARGE_LIST_LIMIT,
        scroll_threshold: float = SCROLL_THRESHOLD_PX,
    ) -> None:
        self._provider = provider
        self._large_list_pages = int(large_list_pages)
        self._large_list_limit = int(large_list_limit)
        self._scroll_threshold = float(scroll_threshold)
        self.search = SearchService(provider)

    @property
    def provider(self) -> MetadataProviderPort:
        return self._provider

    async def home(self) -> HomePage:
        trending, popular = await asyncio.gather(
            self._provider.fetch_listing(ListingCategory.MOVIE_TRENDING),
            self._provider.fetch_listing(ListingCategory.MOVIE_POPULAR, 1),
        )
        return HomePage(
            trending=trending.items[:HOME_TRENDING],
            popular=popular.items[:HOME_POPULAR],
        )

    async def tv_home(self) -> HomePage:
        trending, popular = await asyncio.gather(
            self._provider.fetch_listing(ListingCategory.TV_TRENDING),
            merge_pages(partial(self._provider.fetch_listing, ListingCategory.TV_POPULAR), 2),
        )
        return HomePage(trending=trending.items[:HOME_TRENDING], popular=tuple(popular))

    async def title_page(self, media_type: str, media_id: int) -> TitlePage:
        detail, reviews, cast, similar, videos = await asyncio.gather(
            self._provider.fetch_detail(media_type, media_id),
            self._provider.fetch_reviews(media_type, media_id),
            self._provider.fetch_credits(media_type, media_id),
            self._provider.fetch_similar(media_type, media_id),
            self._provider.fetch_videos(media_type, media_id),
        )
        return TitlePage(
            detail=detail,
            reviews=tuple(reviews[:TITLE_REVIEWS]),
            cast=tuple(cast[:TITLE_CAST]),
            similar=similar.items[:TITLE_SIMILAR],
            trailer=pick_trailer(videos),
        )

    async def actor_page(self, person_id: int) -> ActorPage:
        detail, credits = await asyncio.gather(
            self._provider.fetch_person(person_id),
            self._provider.fetch_person_movie_credits(person_id),
        )
        ranked = [c for c in sort_by_popularity(credits) if has_poster(c)]
        return ActorPage(detail=detail, credits=tuple(ranked[:ACTOR_CREDITS]))

    async def _genre_tile(self, genre: Genre, media_type: str) -> GenreTile:
        page = await self._provider.fetch_by_genre(genre.id, media_type, 1)
        if page.is_empty:
            return GenreTile(genre=genre)
        return GenreTile(
            genre=genre,
            image_url=self._provider.image_url(page.items[0].backdrop_path, SHOWCASE_IMAGE_SIZE),
        )

    async def genre_showcase(self, media_type: str = "movie") -> list[GenreTile]:
        """One backdrop per catalog genre; a failing genre keeps an empty tile."""
        genres = list_genres(media_type, showcase=True)
        results = await asyncio.gather(
            *(self._genre_tile(g, media_type) for g in genres),
            return_exceptions=True,
        )
        tiles: list[GenreTile] = []
        for genre, result in zip(genres, results):
            if isinstance(result, ProviderError):
                logger.warning(
                    "genre showcase fetch failed %s",
                    format_kv(media_type=media_type, genre_id=genre.id, error=str(result)),
                )
                tiles.append(GenreTile(genre=genre))
                continue
            if isinstance(result, BaseException):
                raise result
            tiles.append(result)
        return tiles

    async def _large_list(self, category: ListingCategory) -> list[RankedItem[MediaItem]]:
        merged = await merge_pages(
            partial(self._provider.fetch_listing, category),
            self._large_list_pages,
            self._large_list_limit,
        )
        return rank_items(merged)

    async def fan_favourites(self) -> list[RankedItem[MediaItem]]:
        return await self._large_list(ListingCategory.MOVIE_POPULAR)

    async def top_rated_movies(self) -> list[RankedItem[MediaItem]]:
        return await self._large_list(ListingCategory.MOVIE_TOP_RATED)

    async def top_rated_tv(self) -> list[RankedItem[MediaItem]]:
        return await self._large_list(ListingCategory.TV_TOP_RATED)

    def listing(self, category: ListingCategory) -> ListingController[MediaItem]:
        category = ListingCategory(category)
        return ListingController(
            partial(self._provider.fetch_listing, category),
            item_filter=has_poster,
            scroll_threshold=self._scroll_threshold,
            name=category.value,
        )

    def genre_listing(self, genre_id: int, media_type: str = "movie") -> ListingController[MediaItem]:
        async def fetch(page: int):
            return await self._provider.fetch_by_genre(genre_id, media_type, page)

        return ListingController(
            fetch,
            item_filter=has_poster,
            scroll_threshold=self._scroll_threshold,
            name=f"{media_type}/genre/{genre_id}",
        )

    def people_listing(self) -> ListingController[Person]:
        return ListingController(
            self._provider.fetch_popular_people,
            item_filter=has_profile,
            search_fn=self._provider.search_people,
            scroll_threshold=self._scroll_threshold,
            name="person/popular",
        )

    async def watch_providers(
        self,
        media_type: str,
        media_id: int,
        region: Optional[str] = None,
    ) -> Optional[WatchProvidersView]:
        available = await self._provider.fetch_watch_providers(media_type, media_id)
        chosen = pick_region(available, region)
        if chosen is None:
            return None
        entry = available[chosen]
        return WatchProvidersView(
            region=chosen,
            regions=tuple(sorted(available)),
            link=entry.link,
            flatrate=dedupe_providers(entry.flatrate),
            buy=dedupe_providers(entry.buy),
            rent=dedupe_providers(entry.rent),
        )
