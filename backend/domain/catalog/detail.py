from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from domain.catalog.media_item import MediaItem, Person


@dataclass(frozen=True)
class Genre:
    id: int
    name: str


@dataclass(frozen=True)
class MediaDetail:
    """Full record for a single title (movie or tv)."""

    item: MediaItem
    overview: str = ""
    genres: tuple[Genre, ...] = ()
    runtime: Optional[int] = None
    budget: int = 0
    revenue: int = 0
    tagline: Optional[str] = None
    status: Optional[str] = None
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None

    @property
    def genre_ids(self) -> tuple[int, ...]:
        return tuple(g.id for g in self.genres)


@dataclass(frozen=True)
class PersonDetail:
    person: Person
    biography: str = ""
    birthday: Optional[str] = None
    place_of_birth: Optional[str] = None

    def age(self, today: Optional[date] = None) -> Optional[int]:
        # Year difference only, matching what the profile header shows.
        if not self.birthday or len(self.birthday) < 4:
            return None
        try:
            born = int(self.birthday[:4])
        except ValueError:
            return None
        return (today or date.today()).year - born


@dataclass(frozen=True)
class CastMember:
    id: int
    name: str
    character: Optional[str] = None
    profile_path: Optional[str] = None
    order: int = 0


@dataclass(frozen=True)
class Video:
    key: str
    site: str
    type: str
    name: str = ""


@dataclass(frozen=True)
class WatchProvider:
    provider_id: int
    provider_name: str
    logo_path: Optional[str] = None
    display_priority: int = 0


@dataclass(frozen=True)
class RegionProviders:
    link: Optional[str] = None
    flatrate: tuple[WatchProvider, ...] = ()
    buy: tuple[WatchProvider, ...] = ()
    rent: tuple[WatchProvider, ...] = ()
