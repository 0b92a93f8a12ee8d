from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol

from domain.memory import Profile


class ProfileStorePort(Protocol):
    async def get(self, *, user_id: str) -> Optional[Profile]:
        ...

    async def get_usernames(self, *, user_ids: Iterable[str]) -> Dict[str, str]:
        """Map user id to username for the ids that have one."""
        ...

    async def update(
        self,
        *,
        user_id: str,
        username: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> Profile:
        ...

    async def upload_avatar(self, *, user_id: str, path: str, data: bytes, content_type: str) -> str:
        """Store the image (overwriting) and return its public URL."""
        ...

    async def close(self) -> None:
        ...
