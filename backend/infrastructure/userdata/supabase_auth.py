from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from application.ports.auth_port import AuthPort
from domain.errors import AuthError
from domain.session import AuthEvent, AuthResult, AuthStateCallback, AuthSubscription, AuthUser, Session
from infrastructure.userdata.auth_events import AuthStateBroadcaster
from infrastructure.userdata.supabase_client import SupabaseHttpClient

logger = logging.getLogger(__name__)


def _parse_user(raw: Any) -> Optional[AuthUser]:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    metadata = raw.get("user_metadata") or {}
    username = metadata.get("username") if isinstance(metadata, dict) else None
    return AuthUser(id=str(raw["id"]), email=str(raw.get("email") or ""), username=username or None)


def _parse_expiry(raw: dict[str, Any]) -> Optional[datetime]:
    expires_at = raw.get("expires_at")
    if isinstance(expires_at, (int, float)):
        return datetime.fromtimestamp(float(expires_at), tz=timezone.utc)
    expires_in = raw.get("expires_in")
    if isinstance(expires_in, (int, float)):
        return datetime.now(timezone.utc) + timedelta(seconds=float(expires_in))
    return None


def _parse_session(raw: Any) -> Optional[Session]:
    if not isinstance(raw, dict) or not raw.get("access_token"):
        return None
    user = _parse_user(raw.get("user"))
    if user is None:
        return None
    return Session(
        user=user,
        access_token=str(raw["access_token"]),
        refresh_token=raw.get("refresh_token") or None,
        expires_at=_parse_expiry(raw),
    )


class SupabaseAuthService(AuthPort):
    """GoTrue password auth; the single writer of the current session.

    Session changes are pushed to ``on_auth_state_change`` subscribers and the
    access token is installed on the shared HTTP client for the table stores.
    """

    def __init__(self, client: SupabaseHttpClient) -> None:
        self._client = client
        self._session: Optional[Session] = None
        self._events = AuthStateBroadcaster()

    def _set_session(self, session: Optional[Session], event: AuthEvent) -> None:
        self._session = session
        self._client.set_access_token(session.access_token if session else None)
        self._events.emit(event, session)

    async def sign_up(self, *, email: str, password: str, username: str) -> AuthResult:
        payload = {
            "email": email,
            "password": password,
            "data": {"username": username},
        }
        data = await self._client.request(
            "POST",
            self._client.auth_url("signup"),
            json_body=payload,
            auth_errors=True,
        )
        session = _parse_session(data)
        if session is not None:
            user = session.user
        elif isinstance(data, dict) and "user" in data:
            user = _parse_user(data["user"])
        else:
            # Without auto-confirm GoTrue returns the bare user object.
            user = _parse_user(data)
        if user is None:
            raise AuthError("Sign-up response did not include a user")
        logger.info("auth sign_up user_id=%s confirmed=%s", user.id, session is not None)
        if session is not None:
            self._set_session(session, AuthEvent.SIGNED_IN)
        return AuthResult(user=user, session=session)

    async def sign_in(self, *, email: str, password: str) -> AuthResult:
        data = await self._client.request(
            "POST",
            self._client.auth_url("token"),
            params={"grant_type": "password"},
            json_body={"email": email, "password": password},
            auth_errors=True,
        )
        session = _parse_session(data)
        if session is None:
            raise AuthError("Sign-in response did not include a session")
        logger.info("auth sign_in user_id=%s", session.user.id)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return AuthResult(user=session.user, session=session)

    async def sign_out(self) -> None:
        if self._session is None:
            return
        try:
            await self._client.request("POST", self._client.auth_url("logout"), auth_errors=True)
        except AuthError as exc:
            # An already-expired token cannot be revoked; the local session still ends.
            if exc.status not in (401, 403, 404):
                raise
            logger.info("auth sign_out with stale token status=%s", exc.status)
        self._set_session(None, AuthEvent.SIGNED_OUT)

    async def refresh_session(self) -> Optional[Session]:
        current = self._session
        if current is None or not current.refresh_token:
            return current
        data = await self._client.request(
            "POST",
            self._client.auth_url("token"),
            params={"grant_type": "refresh_token"},
            json_body={"refresh_token": current.refresh_token},
            auth_errors=True,
        )
        session = _parse_session(data)
        if session is None:
            raise AuthError("Refresh response did not include a session")
        self._set_session(session, AuthEvent.TOKEN_REFRESHED)
        return session

    async def get_session(self) -> Optional[Session]:
        session = self._session
        if session is None or session.expires_at is None:
            return session
        if session.expires_at > datetime.now(timezone.utc):
            return session
        try:
            return await self.refresh_session()
        except AuthError as exc:
            logger.warning("auth refresh failed, signing out locally: %s", exc)
            self._set_session(None, AuthEvent.SIGNED_OUT)
            return None

    def on_auth_state_change(self, callback: AuthStateCallback) -> AuthSubscription:
        subscription = self._events.subscribe(callback)
        callback(AuthEvent.INITIAL_SESSION, self._session)
        return subscription

    async def close(self) -> None:
        self._events.clear()
