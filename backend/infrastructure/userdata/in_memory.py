"""In-process user-data backends.

Used when ``USERDATA_PROVIDER=memory`` (local development, tests). Same
semantics as the Supabase clients: unique (user_id, movie_id) rows, newest
first listings, ``None``/``False`` for missing rows.
"""

from __future__ import annotations

import itertools
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from application.ports.auth_port import AuthPort
from application.ports.profile_store_port import ProfileStorePort
from application.ports.review_store_port import ReviewStorePort
from application.ports.watchlist_store_port import WatchlistStorePort
from domain.catalog import MediaItem
from domain.errors import AuthError, UserDataError
from domain.memory import Profile, ReviewEntry, WatchlistEntry, snapshot_fields
from domain.session import AuthEvent, AuthResult, AuthStateCallback, AuthSubscription, AuthUser, Session
from infrastructure.userdata.auth_events import AuthStateBroadcaster

logger = logging.getLogger(__name__)

_MIN_PASSWORD_LENGTH = 6
_SESSION_TTL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryProfileStore(ProfileStorePort):
    def __init__(self) -> None:
        self._profiles: Dict[str, Profile] = {}
        self.objects: Dict[str, bytes] = {}

    def ensure(self, *, user_id: str, username: Optional[str] = None) -> Profile:
        profile = self._profiles.get(user_id)
        if profile is None:
            profile = Profile(id=user_id, username=username)
            self._profiles[user_id] = profile
        return profile

    async def get(self, *, user_id: str) -> Optional[Profile]:
        return self._profiles.get(user_id)

    async def get_usernames(self, *, user_ids: Iterable[str]) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for uid in user_ids:
            profile = self._profiles.get(uid)
            if profile is not None and profile.username:
                out[uid] = profile.username
        return out

    async def update(
        self,
        *,
        user_id: str,
        username: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> Profile:
        profile = self._profiles.get(user_id)
        if profile is None:
            raise UserDataError("profile not found", code="not_found")
        if username is not None:
            profile = replace(profile, username=username)
        if avatar_url is not None:
            profile = replace(profile, avatar_url=avatar_url)
        self._profiles[user_id] = profile
        return profile

    async def upload_avatar(self, *, user_id: str, path: str, data: bytes, content_type: str) -> str:
        self.objects[path] = bytes(data)
        return f"memory://avatars/{path}"

    async def close(self) -> None:
        return None


class InMemoryAuthService(AuthPort):
    def __init__(self, profiles: Optional[InMemoryProfileStore] = None) -> None:
        self._profiles = profiles
        self._accounts: Dict[str, tuple[str, AuthUser]] = {}
        self._session: Optional[Session] = None
        self._events = AuthStateBroadcaster()

    def _issue_session(self, user: AuthUser) -> Session:
        return Session(
            user=user,
            access_token=uuid.uuid4().hex,
            refresh_token=uuid.uuid4().hex,
            expires_at=_utcnow() + _SESSION_TTL,
        )

    def _set_session(self, session: Optional[Session], event: AuthEvent) -> None:
        self._session = session
        self._events.emit(event, session)

    async def sign_up(self, *, email: str, password: str, username: str) -> AuthResult:
        key = (email or "").strip().lower()
        if "@" not in key:
            raise AuthError("Unable to validate email address: invalid format", status=400)
        if len(password or "") < _MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password should be at least {_MIN_PASSWORD_LENGTH} characters", status=422)
        if key in self._accounts:
            raise AuthError("User already registered", status=422)
        user = AuthUser(id=str(uuid.uuid4()), email=key, username=username or None)
        self._accounts[key] = (password, user)
        if self._profiles is not None:
            self._profiles.ensure(user_id=user.id, username=username or None)
        session = self._issue_session(user)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return AuthResult(user=user, session=session)

    async def sign_in(self, *, email: str, password: str) -> AuthResult:
        account = self._accounts.get((email or "").strip().lower())
        if account is None or account[0] != password:
            raise AuthError("Invalid login credentials", status=400)
        session = self._issue_session(account[1])
        self._set_session(session, AuthEvent.SIGNED_IN)
        return AuthResult(user=account[1], session=session)

    async def sign_out(self) -> None:
        if self._session is None:
            return
        self._set_session(None, AuthEvent.SIGNED_OUT)

    async def get_session(self) -> Optional[Session]:
        return self._session

    def on_auth_state_change(self, callback: AuthStateCallback) -> AuthSubscription:
        subscription = self._events.subscribe(callback)
        callback(AuthEvent.INITIAL_SESSION, self._session)
        return subscription

    async def close(self) -> None:
        self._events.clear()


class InMemoryWatchlistStore(WatchlistStorePort):
    def __init__(self) -> None:
        self._entries: Dict[tuple[str, int], WatchlistEntry] = {}
        self._order: Dict[tuple[str, int], int] = {}
        self._seq = itertools.count()

    async def add(self, *, user_id: str, movie_id: int, snapshot: MediaItem) -> WatchlistEntry:
        key = (user_id, int(movie_id))
        existing = self._entries.get(key)
        entry = WatchlistEntry(
            user_id=user_id,
            movie_id=int(movie_id),
            created_at=existing.created_at if existing else _utcnow(),
            id=existing.id if existing else str(uuid.uuid4()),
            **snapshot_fields(snapshot),
        )
        self._entries[key] = entry
        self._order.setdefault(key, next(self._seq))
        return entry

    async def remove(self, *, user_id: str, movie_id: int) -> bool:
        key = (user_id, int(movie_id))
        self._order.pop(key, None)
        return self._entries.pop(key, None) is not None

    async def contains(self, *, user_id: str, movie_id: int) -> bool:
        return (user_id, int(movie_id)) in self._entries

    async def list_entries(self, *, user_id: str) -> List[WatchlistEntry]:
        keys = [k for k in self._entries if k[0] == user_id]
        # Insertion order breaks created_at ties.
        keys.sort(key=lambda k: (self._entries[k].created_at, self._order[k]), reverse=True)
        return [self._entries[k] for k in keys]

    async def count(self, *, user_id: str) -> int:
        return sum(1 for k in self._entries if k[0] == user_id)

    async def close(self) -> None:
        return None


class InMemoryReviewStore(ReviewStorePort):
    def __init__(self) -> None:
        self._reviews: Dict[str, ReviewEntry] = {}
        self._by_key: Dict[tuple[str, int], str] = {}
        self._order: Dict[str, int] = {}
        self._seq = itertools.count()

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
        key = (user_id, int(movie_id))
        now = _utcnow()
        review_id = self._by_key.get(key)
        if review_id is not None:
            entry = replace(
                self._reviews[review_id],
                rating=int(rating),
                content=content,
                movie_title=movie_title,
                movie_poster=movie_poster,
                updated_at=now,
            )
        else:
            review_id = str(uuid.uuid4())
            entry = ReviewEntry(
                user_id=user_id,
                movie_id=int(movie_id),
                rating=int(rating),
                content=content,
                created_at=now,
                updated_at=now,
                id=review_id,
                movie_title=movie_title,
                movie_poster=movie_poster,
            )
            self._by_key[key] = review_id
            self._order[review_id] = next(self._seq)
        self._reviews[review_id] = entry
        return entry

    async def update(self, *, review_id: str, rating: int, content: str) -> Optional[ReviewEntry]:
        entry = self._reviews.get(review_id)
        if entry is None:
            return None
        entry = replace(entry, rating=int(rating), content=content, updated_at=_utcnow())
        self._reviews[review_id] = entry
        return entry

    async def delete(self, *, review_id: str) -> bool:
        entry = self._reviews.pop(review_id, None)
        if entry is None:
            return False
        self._by_key.pop((entry.user_id, entry.movie_id), None)
        self._order.pop(review_id, None)
        return True

    async def get_for_user(self, *, user_id: str, movie_id: int) -> Optional[ReviewEntry]:
        review_id = self._by_key.get((user_id, int(movie_id)))
        return self._reviews.get(review_id) if review_id else None

    def _newest_first(self, entries: Iterable[ReviewEntry]) -> List[ReviewEntry]:
        return sorted(entries, key=lambda e: (e.created_at, self._order[e.id]), reverse=True)

    async def list_for_user(self, *, user_id: str) -> List[ReviewEntry]:
        return self._newest_first(e for e in self._reviews.values() if e.user_id == user_id)

    async def list_for_movie(self, *, movie_id: int) -> List[ReviewEntry]:
        return self._newest_first(e for e in self._reviews.values() if e.movie_id == int(movie_id))

    async def count_for_user(self, *, user_id: str) -> int:
        return sum(1 for e in self._reviews.values() if e.user_id == user_id)

    async def close(self) -> None:
        return None
