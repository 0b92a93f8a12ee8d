from domain.memory.profile import Profile, ProfileStats
from domain.memory.review import (
    ProviderReview,
    Review,
    ReviewDisplay,
    ReviewEntry,
    UserReview,
    normalize_review,
    validate_rating,
)
from domain.memory.watchlist_item import WatchlistEntry, snapshot_fields

__all__ = [
    "Profile",
    "ProfileStats",
    "ProviderReview",
    "Review",
    "ReviewDisplay",
    "ReviewEntry",
    "UserReview",
    "normalize_review",
    "validate_rating",
    "WatchlistEntry",
    "snapshot_fields",
]
