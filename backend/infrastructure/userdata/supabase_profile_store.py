from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from application.ports.profile_store_port import ProfileStorePort
from domain.errors import UserDataError
from domain.memory import Profile
from infrastructure.config.settings import SUPABASE_AVATAR_BUCKET
from infrastructure.userdata.supabase_client import SupabaseHttpClient, eq, in_list

logger = logging.getLogger(__name__)

TABLE = "profiles"


def _parse_profile(raw: Any) -> Profile:
    if not isinstance(raw, dict) or not raw.get("id"):
        raise UserDataError("unexpected profile row shape")
    return Profile(
        id=str(raw["id"]),
        username=raw.get("username") or None,
        avatar_url=raw.get("avatar_url") or None,
    )


class SupabaseProfileStore(ProfileStorePort):
    """``profiles`` table plus the avatar bucket in Supabase Storage."""

    def __init__(self, client: SupabaseHttpClient, *, bucket: str = SUPABASE_AVATAR_BUCKET) -> None:
        self._client = client
        self._bucket = bucket

    async def get(self, *, user_id: str) -> Optional[Profile]:
        row = await self._client.request(
            "GET",
            self._client.rest_url(TABLE),
            params={"select": "*", "id": eq(user_id)},
            single=True,
        )
        return _parse_profile(row) if row is not None else None

    async def get_usernames(self, *, user_ids: Iterable[str]) -> Dict[str, str]:
        ids = list(dict.fromkeys(str(u) for u in user_ids if u))
        if not ids:
            return {}
        data = await self._client.request(
            "GET",
            self._client.rest_url(TABLE),
            params={"select": "id,username", "id": in_list(ids)},
        )
        out: Dict[str, str] = {}
        for row in data or []:
            if isinstance(row, dict) and row.get("id") and row.get("username"):
                out[str(row["id"])] = str(row["username"])
        return out

    async def update(
        self,
        *,
        user_id: str,
        username: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> Profile:
        changes: dict[str, Any] = {}
        if username is not None:
            changes["username"] = username
        if avatar_url is not None:
            changes["avatar_url"] = avatar_url
        if not changes:
            current = await self.get(user_id=user_id)
            if current is None:
                raise UserDataError("profile not found", code="not_found")
            return current
        data = await self._client.request(
            "PATCH",
            self._client.rest_url(TABLE),
            params={"id": eq(user_id)},
            json_body=changes,
            headers={"prefer": "return=representation"},
        )
        rows = data if isinstance(data, list) else []
        if not rows:
            raise UserDataError("profile not found", code="not_found")
        logger.info("profile update user_id=%s fields=%s", user_id, sorted(changes))
        return _parse_profile(rows[0])

    async def upload_avatar(self, *, user_id: str, path: str, data: bytes, content_type: str) -> str:
        await self._client.request(
            "POST",
            self._client.storage_url(f"object/{self._bucket}/{path}"),
            data=data,
            headers={"content-type": content_type, "x-upsert": "true"},
        )
        logger.info("avatar upload user_id=%s path=%s bytes=%d", user_id, path, len(data))
        return self._client.public_object_url(self._bucket, path)

    async def close(self) -> None:
        await self._client.close()
