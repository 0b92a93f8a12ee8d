from domain.catalog.categories import ListingCategory, SearchScope
from domain.catalog.detail import (
    CastMember,
    Genre,
    MediaDetail,
    PersonDetail,
    RegionProviders,
    Video,
    WatchProvider,
)
from domain.catalog.listing import ListingPhase, ListingState, ScrollPosition
from domain.catalog.media_item import MediaItem, MediaType, PaginatedResult, Person, RankedItem
from domain.catalog.search import SearchResults

__all__ = [
    "ListingCategory",
    "SearchScope",
    "CastMember",
    "Genre",
    "MediaDetail",
    "PersonDetail",
    "RegionProviders",
    "Video",
    "WatchProvider",
    "ListingPhase",
    "ListingState",
    "ScrollPosition",
    "MediaItem",
    "MediaType",
    "PaginatedResult",
    "Person",
    "RankedItem",
    "SearchResults",
]
