from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

MIN_RATING = 1
MAX_RATING = 10
ANONYMOUS = "Anonymous"


@dataclass(frozen=True)
class ReviewEntry:
    """A stored user review; unique per (user_id, movie_id)."""

    user_id: str
    movie_id: int
    rating: int
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    id: Optional[str] = None
    movie_title: Optional[str] = None
    movie_poster: Optional[str] = None
    # Filled by the best-effort profile join; never stored.
    username: Optional[str] = None


@dataclass(frozen=True)
class ProviderReview:
    """A review published by the metadata provider (TMDB)."""

    id: str
    author: str
    content: str
    rating: Optional[float] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class UserReview:
    entry: ReviewEntry
    is_own: bool = False


Review = Union[ProviderReview, UserReview]


@dataclass(frozen=True)
class ReviewDisplay:
    author: str
    content: str
    rating: Optional[float] = None
    created_at: Optional[datetime] = None
    is_own: bool = False

    @property
    def initial(self) -> str:
        return (self.author or "?")[:1].upper()


def validate_rating(rating: int) -> int:
    try:
        value = int(rating)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"rating must be an integer between {MIN_RATING} and {MAX_RATING}") from exc
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValueError(f"rating must be between {MIN_RATING} and {MAX_RATING}, got {value}")
    return value


def normalize_review(review: Review) -> ReviewDisplay:
    match review:
        case ProviderReview(author=author, content=content, rating=rating, created_at=created_at):
            return ReviewDisplay(
                author=author or ANONYMOUS,
                content=content,
                rating=rating,
                created_at=created_at,
            )
        case UserReview(entry=entry, is_own=is_own):
            return ReviewDisplay(
                author=entry.username or ANONYMOUS,
                content=entry.content,
                rating=float(entry.rating),
                created_at=entry.created_at,
                is_own=is_own,
            )
    raise TypeError(f"unsupported review variant: {type(review).__name__}")
