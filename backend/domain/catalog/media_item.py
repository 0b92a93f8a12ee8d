from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, Optional, TypeVar

MediaType = Literal["movie", "tv"]
MEDIA_TYPES: tuple[str, ...] = ("movie", "tv")

T = TypeVar("T")


def parse_year(date: Optional[str]) -> Optional[int]:
    """Return the year of an ISO date string ("2014-11-05"), or None."""
    raw = (date or "").strip()
    if len(raw) < 4:
        return None
    try:
        return int(raw[:4])
    except ValueError:
        return None


@dataclass(frozen=True)
class MediaItem:
    """A movie or TV show as returned by a listing/search endpoint.

    Identity is ``(media_type, id)``: TMDB reuses numeric ids across the movie
    and tv namespaces.
    """

    id: int
    media_type: MediaType
    title: str
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: float = 0.0
    release_date: Optional[str] = None
    popularity: float = 0.0
    genre_ids: tuple[int, ...] = ()
    # Only set for person credit listings ("as <character>").
    character: Optional[str] = None

    @property
    def key(self) -> tuple[str, int]:
        return (self.media_type, self.id)

    @property
    def release_year(self) -> Optional[int]:
        return parse_year(self.release_date)


@dataclass(frozen=True)
class Person:
    id: int
    name: str
    profile_path: Optional[str] = None
    known_for_department: Optional[str] = None
    popularity: float = 0.0


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One provider page.

    ``total_pages`` is never smaller than ``page`` (parsers normalize it), so
    ``has_more`` is simply ``page < total_pages``.
    """

    items: tuple[T, ...]
    page: int = 1
    total_pages: int = 1
    total_results: int = 0

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class RankedItem(Generic[T]):
    rank: int
    item: T

    @property
    def label(self) -> str:
        return f"#{self.rank}"
