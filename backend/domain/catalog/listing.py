from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ListingPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    LOADING_MORE = "loading_more"
    EXHAUSTED = "exhausted"
    # Initial fetch failed; terminal for the session like EXHAUSTED.
    FAILED = "failed"


TERMINAL_PHASES = frozenset({ListingPhase.EXHAUSTED, ListingPhase.FAILED})


@dataclass(frozen=True)
class ScrollPosition:
    scroll_top: float
    client_height: float
    scroll_height: float

    def near_bottom(self, threshold: float) -> bool:
        return self.scroll_top + self.client_height >= self.scroll_height - threshold


@dataclass
class ListingState(Generic[T]):
    """Accumulated state of one listing session.

    Items are not deduplicated across pages.
    """

    items: list[T] = field(default_factory=list)
    current_page: int = 0
    has_more: bool = False
    phase: ListingPhase = ListingPhase.IDLE
    search_mode: bool = False
    error: Optional[str] = None

    @property
    def is_loading_more(self) -> bool:
        return self.phase is ListingPhase.LOADING_MORE

    @property
    def is_loading(self) -> bool:
        return self.phase in (ListingPhase.LOADING, ListingPhase.LOADING_MORE)
