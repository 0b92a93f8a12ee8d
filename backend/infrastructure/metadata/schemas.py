"""Wire models for TMDB v3 payloads.

Only the fields the catalog uses are declared; everything else is ignored.
Each model knows how to turn itself into the matching domain type.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from domain.catalog.detail import (
    CastMember,
    Genre,
    MediaDetail,
    PersonDetail,
    RegionProviders,
    Video,
    WatchProvider,
)
from domain.catalog.media_item import MediaItem, Person
from domain.memory.review import ProviderReview


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TmdbModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TmdbMediaResult(TmdbModel):
    id: int
    title: Optional[str] = None
    name: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: float = 0.0
    release_date: Optional[str] = None
    first_air_date: Optional[str] = None
    popularity: float = 0.0
    genre_ids: List[int] = []
    media_type: Optional[str] = None
    character: Optional[str] = None

    @field_validator("poster_path", "backdrop_path", "release_date", "first_air_date", mode="before")
    @classmethod
    def _empty_strings(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("vote_average", "popularity", mode="before")
    @classmethod
    def _null_numbers(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    def to_media_item(self, media_type: str) -> MediaItem:
        if media_type == "tv":
            title = self.name or self.title or ""
            date = self.first_air_date or self.release_date
        else:
            title = self.title or self.name or ""
            date = self.release_date or self.first_air_date
        return MediaItem(
            id=self.id,
            media_type="tv" if media_type == "tv" else "movie",
            title=title,
            poster_path=self.poster_path,
            backdrop_path=self.backdrop_path,
            vote_average=float(self.vote_average),
            release_date=date,
            popularity=float(self.popularity),
            genre_ids=tuple(self.genre_ids),
            character=self.character,
        )


class TmdbPersonResult(TmdbModel):
    id: int
    name: str = ""
    profile_path: Optional[str] = None
    known_for_department: Optional[str] = None
    popularity: float = 0.0

    @field_validator("profile_path", "known_for_department", mode="before")
    @classmethod
    def _empty_strings(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("popularity", mode="before")
    @classmethod
    def _null_numbers(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    def to_person(self) -> Person:
        return Person(
            id=self.id,
            name=self.name,
            profile_path=self.profile_path,
            known_for_department=self.known_for_department,
            popularity=float(self.popularity),
        )


class TmdbPage(TmdbModel):
    page: int = 1
    results: List[Dict[str, Any]] = []
    total_pages: int = 0
    total_results: int = 0

    @property
    def normalized_total_pages(self) -> int:
        # Empty searches report total_pages=0 on page 1.
        return max(int(self.total_pages), int(self.page))


class TmdbGenre(TmdbModel):
    id: int
    name: str = ""

    def to_genre(self) -> Genre:
        return Genre(id=self.id, name=self.name)


class TmdbGenreList(TmdbModel):
    genres: List[TmdbGenre] = []


class TmdbMediaDetail(TmdbMediaResult):
    overview: Optional[str] = None
    genres: List[TmdbGenre] = []
    runtime: Optional[int] = None
    budget: Optional[int] = None
    revenue: Optional[int] = None
    tagline: Optional[str] = None
    status: Optional[str] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None

    @field_validator("tagline", "status", mode="before")
    @classmethod
    def _empty_text(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_detail(self, media_type: str) -> MediaDetail:
        item = self.to_media_item(media_type)
        if not item.genre_ids and self.genres:
            # Detail payloads carry genre objects instead of genre_ids.
            item = replace(item, genre_ids=tuple(g.id for g in self.genres))
        return MediaDetail(
            item=item,
            overview=self.overview or "",
            genres=tuple(g.to_genre() for g in self.genres),
            runtime=self.runtime or None,
            budget=int(self.budget or 0),
            revenue=int(self.revenue or 0),
            tagline=self.tagline,
            status=self.status,
            number_of_seasons=self.number_of_seasons,
            number_of_episodes=self.number_of_episodes,
        )


class TmdbPersonDetail(TmdbPersonResult):
    biography: Optional[str] = None
    birthday: Optional[str] = None
    place_of_birth: Optional[str] = None

    @field_validator("birthday", "place_of_birth", mode="before")
    @classmethod
    def _empty_text(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_detail(self) -> PersonDetail:
        return PersonDetail(
            person=self.to_person(),
            biography=self.biography or "",
            birthday=self.birthday,
            place_of_birth=self.place_of_birth,
        )


class TmdbCastMember(TmdbModel):
    id: int
    name: str = ""
    character: Optional[str] = None
    profile_path: Optional[str] = None
    order: int = 0

    def to_cast_member(self) -> CastMember:
        return CastMember(
            id=self.id,
            name=self.name,
            character=self.character or None,
            profile_path=self.profile_path or None,
            order=int(self.order or 0),
        )


class TmdbCredits(TmdbModel):
    cast: List[TmdbCastMember] = []


class TmdbPersonMovieCredits(TmdbModel):
    cast: List[TmdbMediaResult] = []


class TmdbVideo(TmdbModel):
    key: str
    site: str = ""
    type: str = ""
    name: str = ""

    def to_video(self) -> Video:
        return Video(key=self.key, site=self.site, type=self.type, name=self.name)


class TmdbVideoList(TmdbModel):
    results: List[TmdbVideo] = []


class TmdbAuthorDetails(TmdbModel):
    username: Optional[str] = None
    rating: Optional[float] = None


class TmdbReview(TmdbModel):
    id: str
    author: str = ""
    content: str = ""
    author_details: TmdbAuthorDetails = TmdbAuthorDetails()
    created_at: Optional[datetime] = None

    def to_review(self) -> ProviderReview:
        return ProviderReview(
            id=self.id,
            author=self.author or (self.author_details.username or ""),
            content=self.content,
            rating=self.author_details.rating,
            created_at=self.created_at,
        )


class TmdbReviewList(TmdbModel):
    results: List[TmdbReview] = []


class TmdbWatchProvider(TmdbModel):
    provider_id: int
    provider_name: str = ""
    logo_path: Optional[str] = None
    display_priority: int = 0

    def to_provider(self) -> WatchProvider:
        return WatchProvider(
            provider_id=self.provider_id,
            provider_name=self.provider_name,
            logo_path=self.logo_path,
            display_priority=self.display_priority,
        )


class TmdbRegionProviders(TmdbModel):
    link: Optional[str] = None
    flatrate: List[TmdbWatchProvider] = []
    buy: List[TmdbWatchProvider] = []
    rent: List[TmdbWatchProvider] = []

    def to_region(self) -> RegionProviders:
        return RegionProviders(
            link=self.link,
            flatrate=tuple(p.to_provider() for p in self.flatrate),
            buy=tuple(p.to_provider() for p in self.buy),
            rent=tuple(p.to_provider() for p in self.rent),
        )


class TmdbWatchProviders(TmdbModel):
    results: Dict[str, TmdbRegionProviders] = {}
