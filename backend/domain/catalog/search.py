from __future__ import annotations

from dataclasses import dataclass

from domain.catalog.categories import SearchScope
from domain.catalog.media_item import MediaItem, Person


@dataclass(frozen=True)
class SearchResults:
    """Search hits partitioned per type; types outside the scope stay empty."""

    query: str = ""
    scope: SearchScope = SearchScope.ALL
    movies: tuple[MediaItem, ...] = ()
    tv_shows: tuple[MediaItem, ...] = ()
    people: tuple[Person, ...] = ()

    @property
    def total(self) -> int:
        return len(self.movies) + len(self.tv_shows) + len(self.people)

    @property
    def is_empty(self) -> bool:
        return self.total == 0
