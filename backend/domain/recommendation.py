from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from domain.catalog.media_item import MediaItem

RecommendationSource = Literal["personalized", "provider", "none"]


@dataclass(frozen=True)
class RecommendationPolicy:
    watchlist_sample: int = 5
    max_genres: int = 3
    limit: int = 12
    min_vote_count: int = 100
    min_vote_average: float = 6.5


@dataclass(frozen=True)
class RecommendationSet:
    """Derived per detail view; never persisted."""

    items: tuple[MediaItem, ...] = ()
    source: RecommendationSource = "none"
    failed: bool = False

    @property
    def personalized(self) -> bool:
        return self.source == "personalized"

    def displayable(self) -> tuple[MediaItem, ...]:
        return tuple(it for it in self.items if it.poster_path)
