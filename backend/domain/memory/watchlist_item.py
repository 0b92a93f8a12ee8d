from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.catalog.media_item import MediaItem, parse_year


@dataclass(frozen=True)
class WatchlistEntry:
    """A user-scoped watchlist row; unique per (user_id, movie_id).

    The title/poster/rating fields are a snapshot taken when the movie was
    added, so the watchlist page renders without calling the provider.
    """

    user_id: str
    movie_id: int
    title: str
    poster_path: Optional[str] = None
    vote_average: float = 0.0
    release_date: Optional[str] = None
    created_at: Optional[datetime] = None
    id: Optional[str] = None

    @property
    def key(self) -> tuple[str, int]:
        return (self.user_id, self.movie_id)

    @property
    def release_year(self) -> Optional[int]:
        return parse_year(self.release_date)


def snapshot_fields(item: MediaItem) -> dict:
    """Columns copied from a MediaItem into a watchlist row."""
    return {
        "title": item.title,
        "poster_path": item.poster_path,
        "vote_average": float(item.vote_average or 0.0),
        "release_date": item.release_date,
    }
