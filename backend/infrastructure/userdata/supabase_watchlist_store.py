from __future__ import annotations

import logging
from typing import Any, List

from application.ports.watchlist_store_port import WatchlistStorePort
from domain.catalog import MediaItem
from domain.errors import UserDataError
from domain.memory import WatchlistEntry, snapshot_fields
from infrastructure.userdata.supabase_client import SupabaseHttpClient, eq, parse_timestamp

logger = logging.getLogger(__name__)

TABLE = "watchlists"


def _parse_entry(raw: Any) -> WatchlistEntry:
    if not isinstance(raw, dict):
        raise UserDataError("unexpected watchlist row shape")
    return WatchlistEntry(
        user_id=str(raw.get("user_id") or ""),
        movie_id=int(raw.get("movie_id") or 0),
        title=str(raw.get("title") or ""),
        poster_path=raw.get("poster_path") or None,
        vote_average=float(raw.get("vote_average") or 0.0),
        release_date=raw.get("release_date") or None,
        created_at=parse_timestamp(raw.get("created_at")),
        id=str(raw["id"]) if raw.get("id") is not None else None,
    )


class SupabaseWatchlistStore(WatchlistStorePort):
    """``watchlists`` table through PostgREST; unique on (user_id, movie_id)."""

    def __init__(self, client: SupabaseHttpClient) -> None:
        self._client = client

    async def add(self, *, user_id: str, movie_id: int, snapshot: MediaItem) -> WatchlistEntry:
        row = {"user_id": user_id, "movie_id": int(movie_id), **snapshot_fields(snapshot)}
        # Re-adding an existing movie refreshes the snapshot instead of failing.
        data = await self._client.request(
            "POST",
            self._client.rest_url(TABLE),
            params={"on_conflict": "user_id,movie_id"},
            json_body=[row],
            headers={"prefer": "resolution=merge-duplicates,return=representation"},
        )
        rows = data if isinstance(data, list) else []
        if not rows:
            raise UserDataError("watchlist insert returned no row")
        logger.info("watchlist add user_id=%s movie_id=%s", user_id, movie_id)
        return _parse_entry(rows[0])

    async def remove(self, *, user_id: str, movie_id: int) -> bool:
        data = await self._client.request(
            "DELETE",
            self._client.rest_url(TABLE),
            params={"user_id": eq(user_id), "movie_id": eq(int(movie_id))},
            headers={"prefer": "return=representation"},
        )
        removed = bool(data) if isinstance(data, list) else False
        logger.info("watchlist remove user_id=%s movie_id=%s removed=%s", user_id, movie_id, removed)
        return removed

    async def contains(self, *, user_id: str, movie_id: int) -> bool:
        row = await self._client.request(
            "GET",
            self._client.rest_url(TABLE),
            params={"select": "id", "user_id": eq(user_id), "movie_id": eq(int(movie_id))},
            single=True,
        )
        return row is not None

    async def list_entries(self, *, user_id: str) -> List[WatchlistEntry]:
        data = await self._client.request(
            "GET",
            self._client.rest_url(TABLE),
            params={"select": "*", "user_id": eq(user_id), "order": "created_at.desc"},
        )
        return [_parse_entry(r) for r in (data or [])]

    async def count(self, *, user_id: str) -> int:
        return await self._client.count(TABLE, {"user_id": eq(user_id)})

    async def close(self) -> None:
        await self._client.close()
