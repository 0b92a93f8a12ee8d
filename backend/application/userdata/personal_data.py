"""Facade over the auth service and the user-data stores.

Mutations only change durable state; nothing is cached here, callers re-query
after a write. Missing rows are ``None``/``False``, never errors.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from typing import List, Optional

from application.ports.auth_port import AuthPort
from application.ports.profile_store_port import ProfileStorePort
from application.ports.review_store_port import ReviewStorePort
from application.ports.watchlist_store_port import WatchlistStorePort
from domain.catalog import MediaItem
from domain.errors import CineScopeError
from domain.memory import Profile, ProfileStats, ReviewEntry, WatchlistEntry, validate_rating
from domain.memory.review import ANONYMOUS
from domain.session import AuthResult, AuthStateCallback, AuthSubscription, Session
from infrastructure.config.settings import AVATAR_MAX_BYTES
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)


def _require_content(content: str) -> str:
    text = (content or "").strip()
    if not text:
        raise ValueError("review content must not be empty")
    return text


def avatar_object_path(user_id: str, filename: str, *, now_ms: Optional[int] = None) -> str:
    """Object key ``<user_id>-<epoch ms>.<ext>``."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in (filename or "") else "png"
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{user_id}-{stamp}.{ext}"


class PersonalDataClient:
    def __init__(
        self,
        *,
        auth: AuthPort,
        watchlist: WatchlistStorePort,
        reviews: ReviewStorePort,
        profiles: ProfileStorePort,
        avatar_max_bytes: int = AVATAR_MAX_BYTES,
    ) -> None:
        self._auth = auth
        self._watchlist = watchlist
        self._reviews = reviews
        self._profiles = profiles
        self._avatar_max_bytes = int(avatar_max_bytes)

    @classmethod
    def from_backends(cls, backends) -> "PersonalDataClient":
        return cls(
            auth=backends.auth,
            watchlist=backends.watchlist,
            reviews=backends.reviews,
            profiles=backends.profiles,
        )

    @property
    def auth(self) -> AuthPort:
        return self._auth

    @property
    def watchlist_store(self) -> WatchlistStorePort:
        return self._watchlist

    # ===== Auth =====

    async def sign_up(self, email: str, password: str, username: str) -> AuthResult:
        return await self._auth.sign_up(email=email, password=password, username=username)

    async def sign_in(self, email: str, password: str) -> AuthResult:
        return await self._auth.sign_in(email=email, password=password)

    async def sign_out(self) -> None:
        await self._auth.sign_out()

    async def get_session(self) -> Optional[Session]:
        return await self._auth.get_session()

    def on_auth_state_change(self, callback: AuthStateCallback) -> AuthSubscription:
        return self._auth.on_auth_state_change(callback)

    # ===== Watchlist =====

    async def add_to_watchlist(self, user_id: str, movie_id: int, snapshot: MediaItem) -> WatchlistEntry:
        return await self._watchlist.add(user_id=user_id, movie_id=int(movie_id), snapshot=snapshot)

    async def remove_from_watchlist(self, user_id: str, movie_id: int) -> bool:
        return await self._watchlist.remove(user_id=user_id, movie_id=int(movie_id))

    async def is_in_watchlist(self, user_id: str, movie_id: int) -> bool:
        return await self._watchlist.contains(user_id=user_id, movie_id=int(movie_id))

    async def list_watchlist(self, user_id: str) -> List[WatchlistEntry]:
        return await self._watchlist.list_entries(user_id=user_id)

    # ===== Reviews =====

    async def upsert_review(
        self,
        user_id: str,
        movie_id: int,
        rating: int,
        content: str,
        snapshot: Optional[MediaItem] = None,
    ) -> ReviewEntry:
        return await self._reviews.upsert(
            user_id=user_id,
            movie_id=int(movie_id),
            rating=validate_rating(rating),
            content=_require_content(content),
            movie_title=snapshot.title if snapshot else None,
            movie_poster=snapshot.poster_path if snapshot else None,
        )

    async def update_review(self, review_id: str, rating: int, content: str) -> Optional[ReviewEntry]:
        return await self._reviews.update(
            review_id=review_id,
            rating=validate_rating(rating),
            content=_require_content(content),
        )

    async def delete_review(self, review_id: str) -> bool:
        return await self._reviews.delete(review_id=review_id)

    async def get_user_review(self, user_id: str, movie_id: int) -> Optional[ReviewEntry]:
        return await self._reviews.get_for_user(user_id=user_id, movie_id=int(movie_id))

    async def list_user_reviews(self, user_id: str) -> List[ReviewEntry]:
        return await self._reviews.list_for_user(user_id=user_id)

    async def list_reviews_for_movie(self, movie_id: int) -> List[ReviewEntry]:
        """Newest first, each with the author's username (or "Anonymous")."""
        entries = await self._reviews.list_for_movie(movie_id=int(movie_id))
        if not entries:
            return []
        try:
            usernames = await self._profiles.get_usernames(user_ids={e.user_id for e in entries})
        except CineScopeError as exc:
            logger.warning("review username lookup failed %s", format_kv(movie_id=movie_id, error=str(exc)))
            usernames = {}
        return [replace(e, username=usernames.get(e.user_id) or ANONYMOUS) for e in entries]

    # ===== Profile =====

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        return await self._profiles.get(user_id=user_id)

    async def update_username(self, user_id: str, username: str) -> Profile:
        name = (username or "").strip()
        if not name:
            raise ValueError("username must not be empty")
        return await self._profiles.update(user_id=user_id, username=name)

    async def upload_avatar(self, user_id: str, data: bytes, content_type: str, filename: str) -> Profile:
        if len(data) > self._avatar_max_bytes:
            raise ValueError(f"avatar must be at most {self._avatar_max_bytes} bytes")
        if not (content_type or "").lower().startswith("image/"):
            raise ValueError("avatar must be an image")
        path = avatar_object_path(user_id, filename)
        url = await self._profiles.upload_avatar(user_id=user_id, path=path, data=data, content_type=content_type)
        return await self._profiles.update(user_id=user_id, avatar_url=url)

    async def profile_stats(self, user_id: str) -> ProfileStats:
        watchlist_count, reviews_count = await asyncio.gather(
            self._watchlist.count(user_id=user_id),
            self._reviews.count_for_user(user_id=user_id),
        )
        return ProfileStats(watchlist_count=watchlist_count, reviews_count=reviews_count)
