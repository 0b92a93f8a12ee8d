from __future__ import annotations

from typing import List, Optional, Protocol

from domain.memory import ReviewEntry


class ReviewStorePort(Protocol):
    async def upsert(
        self,
        *,
        user_id: str,
        movie_id: int,
        rating: int,
        content: str,
        movie_title: Optional[str] = None,
        movie_poster: Optional[str] = None,
    ) -> ReviewEntry:
        """Create or replace the single review of a user for a movie."""
        ...

    async def update(self, *, review_id: str, rating: int, content: str) -> Optional[ReviewEntry]:
        ...

    async def delete(self, *, review_id: str) -> bool:
        ...

    async def get_for_user(self, *, user_id: str, movie_id: int) -> Optional[ReviewEntry]:
        ...

    async def list_for_user(self, *, user_id: str) -> List[ReviewEntry]:
        ...

    async def list_for_movie(self, *, movie_id: int) -> List[ReviewEntry]:
        """Reviews for a movie, newest first; ``username`` is left unset."""
        ...

    async def count_for_user(self, *, user_id: str) -> int:
        ...

    async def close(self) -> None:
        ...
