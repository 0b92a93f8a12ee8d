from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence, TypeVar

from domain.catalog.detail import RegionProviders, Video, WatchProvider
from domain.catalog.media_item import MediaItem, Person, RankedItem

T = TypeVar("T")

DEFAULT_REGION = "US"


def has_poster(item: MediaItem) -> bool:
    return bool(item.poster_path)


def has_profile(person: Person) -> bool:
    return bool(person.profile_path)


def rank_items(items: Iterable[T]) -> list[RankedItem[T]]:
    """Attach presentational ranks (#1..#N) in sequence order."""
    return [RankedItem(rank=idx, item=item) for idx, item in enumerate(items, start=1)]


def pick_trailer(videos: Sequence[Video]) -> Optional[Video]:
    """Prefer an official YouTube trailer, else any YouTube video."""
    for v in videos:
        if v.type == "Trailer" and v.site == "YouTube":
            return v
    for v in videos:
        if v.site == "YouTube":
            return v
    return None


def dedupe_providers(providers: Iterable[WatchProvider]) -> tuple[WatchProvider, ...]:
    """Collapse plan variants ("Netflix", "Netflix Standard with Ads") by first word."""
    seen: set[str] = set()
    out: list[WatchProvider] = []
    for p in providers:
        base = (p.provider_name or "").split(" ")[0].lower()
        if base in seen:
            continue
        seen.add(base)
        out.append(p)
    return tuple(out)


def pick_region(available: Mapping[str, RegionProviders], requested: Optional[str] = None) -> Optional[str]:
    if not available:
        return None
    if requested and requested in available:
        return requested
    if DEFAULT_REGION in available:
        return DEFAULT_REGION
    return sorted(available)[0]


def sort_by_popularity(items: Iterable[MediaItem]) -> list[MediaItem]:
    return sorted(items, key=lambda it: float(it.popularity or 0.0), reverse=True)
