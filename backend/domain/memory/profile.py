from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Profile:
    id: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class ProfileStats:
    watchlist_count: int = 0
    reviews_count: int = 0
