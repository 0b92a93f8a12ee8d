from __future__ import annotations

from typing import List, Protocol

from domain.catalog import MediaItem
from domain.memory import WatchlistEntry


class WatchlistStorePort(Protocol):
    async def add(self, *, user_id: str, movie_id: int, snapshot: MediaItem) -> WatchlistEntry:
        """Insert (or keep) the row for (user_id, movie_id)."""
        ...

    async def remove(self, *, user_id: str, movie_id: int) -> bool:
        ...

    async def contains(self, *, user_id: str, movie_id: int) -> bool:
        ...

    async def list_entries(self, *, user_id: str) -> List[WatchlistEntry]:
        """All rows for a user, newest first."""
        ...

    async def count(self, *, user_id: str) -> int:
        ...

    async def close(self) -> None:
        ...
