from __future__ import annotations

from typing import Optional, Protocol, Sequence

from domain.catalog import (
    CastMember,
    Genre,
    ListingCategory,
    MediaDetail,
    MediaItem,
    PaginatedResult,
    Person,
    PersonDetail,
    RegionProviders,
    SearchResults,
    SearchScope,
    Video,
)
from domain.memory import ProviderReview


class MetadataProviderPort(Protocol):
    """Read-only movie/TV metadata source. Every failure raises ProviderError."""

    async def fetch_listing(self, category: ListingCategory, page: int = 1) -> PaginatedResult[MediaItem]:
        ...

    async def fetch_detail(self, media_type: str, media_id: int) -> MediaDetail:
        ...

    async def fetch_by_genre(
        self,
        genre_id: int,
        media_type: str = "movie",
        page: int = 1,
    ) -> PaginatedResult[MediaItem]:
        ...

    async def discover_movies(
        self,
        *,
        genre_ids: Sequence[int],
        min_vote_count: int | None = None,
        min_vote_average: float | None = None,
        page: int = 1,
    ) -> PaginatedResult[MediaItem]:
        ...

    async def search_movies(self, query: str) -> PaginatedResult[MediaItem]:
        ...

    async def search_tv(self, query: str) -> PaginatedResult[MediaItem]:
        ...

    async def search_people(self, query: str) -> PaginatedResult[Person]:
        ...

    async def search(self, query: str, scope: SearchScope | str = SearchScope.ALL) -> SearchResults:
        ...

    async def fetch_recommendations(self, media_type: str, media_id: int) -> PaginatedResult[MediaItem]:
        ...

    async def fetch_similar(self, media_type: str, media_id: int) -> PaginatedResult[MediaItem]:
        ...

    async def fetch_credits(self, media_type: str, media_id: int) -> list[CastMember]:
        ...

    async def fetch_videos(self, media_type: str, media_id: int) -> list[Video]:
        ...

    async def fetch_reviews(self, media_type: str, media_id: int) -> list[ProviderReview]:
        ...

    async def fetch_watch_providers(self, media_type: str, media_id: int) -> dict[str, RegionProviders]:
        ...

    async def fetch_popular_people(self, page: int = 1) -> PaginatedResult[Person]:
        ...

    async def fetch_person(self, person_id: int) -> PersonDetail:
        ...

    async def fetch_person_movie_credits(self, person_id: int) -> list[MediaItem]:
        ...

    async def fetch_genres(self, media_type: str = "movie") -> list[Genre]:
        ...

    def image_url(self, path: Optional[str], size: str = "w500") -> str:
        ...

    async def close(self) -> None:
        ...
