from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from application.ports.review_store_port import ReviewStorePort
from domain.errors import UserDataError
from domain.memory import ReviewEntry
from infrastructure.userdata.supabase_client import SupabaseHttpClient, eq, parse_timestamp

logger = logging.getLogger(__name__)

TABLE = "reviews"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_review(raw: Any) -> ReviewEntry:
    if not isinstance(raw, dict):
        raise UserDataError("unexpected review row shape")
    return ReviewEntry(
        user_id=str(raw.get("user_id") or ""),
        movie_id=int(raw.get("movie_id") or 0),
        rating=int(raw.get("rating") or 0),
        # The table column is named "comment".
        content=str(raw.get("comment") or ""),
        created_at=parse_timestamp(raw.get("created_at")),
        updated_at=parse_timestamp(raw.get("updated_at")),
        id=str(raw["id"]) if raw.get("id") is not None else None,
        movie_title=raw.get("movie_title") or None,
        movie_poster=raw.get("movie_poster") or None,
    )


class SupabaseReviewStore(ReviewStorePort):
    """``reviews`` table through PostgREST; one row per (user_id, movie_id)."""

    def __init__(self, client: SupabaseHttpClient) -> None:
        self._client = client

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
        row = {
            "user_id": user_id,
            "movie_id": int(movie_id),
            "rating": int(rating),
            "comment": content,
            "movie_title": movie_title,
            "movie_poster": movie_poster,
            "updated_at": _now_iso(),
        }
        data = await self._client.request(
            "POST",
            self._client.rest_url(TABLE),
            params={"on_conflict": "user_id,movie_id"},
            json_body=[row],
            headers={"prefer": "resolution=merge-duplicates,return=representation"},
        )
        rows = data if isinstance(data, list) else []
        if not rows:
            raise UserDataError("review upsert returned no row")
        logger.info("review upsert user_id=%s movie_id=%s rating=%s", user_id, movie_id, rating)
        return _parse_review(rows[0])

    async def update(self, *, review_id: str, rating: int, content: str) -> Optional[ReviewEntry]:
        data = await self._client.request(
            "PATCH",
            self._client.rest_url(TABLE),
            params={"id": eq(review_id)},
            json_body={"rating": int(rating), "comment": content, "updated_at": _now_iso()},
            headers={"prefer": "return=representation"},
        )
        rows = data if isinstance(data, list) else []
        return _parse_review(rows[0]) if rows else None

    async def delete(self, *, review_id: str) -> bool:
        data = await self._client.request(
            "DELETE",
            self._client.rest_url(TABLE),
            params={"id": eq(review_id)},
            headers={"prefer": "return=representation"},
        )
        return bool(data) if isinstance(data, list) else False

    async def get_for_user(self, *, user_id: str, movie_id: int) -> Optional[ReviewEntry]:
        row = await self._client.request(
            "GET",
            self._client.rest_url(TABLE),
            params={"select": "*", "user_id": eq(user_id), "movie_id": eq(int(movie_id))},
            single=True,
        )
        return _parse_review(row) if row is not None else None

    async def list_for_user(self, *, user_id: str) -> List[ReviewEntry]:
        data = await self._client.request(
            "GET",
            self._client.rest_url(TABLE),
            params={"select": "*", "user_id": eq(user_id), "order": "created_at.desc"},
        )
        return [_parse_review(r) for r in (data or [])]

    async def list_for_movie(self, *, movie_id: int) -> List[ReviewEntry]:
        data = await self._client.request(
            "GET",
            self._client.rest_url(TABLE),
            params={"select": "*", "movie_id": eq(int(movie_id)), "order": "created_at.desc"},
        )
        return [_parse_review(r) for r in (data or [])]

    async def count_for_user(self, *, user_id: str) -> int:
        return await self._client.count(TABLE, {"user_id": eq(user_id)})

    async def close(self) -> None:
        await self._client.close()
