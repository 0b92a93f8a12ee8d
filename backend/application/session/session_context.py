"""Explicit auth/language context shared by the views.

``init()`` reads the current session and subscribes to auth changes;
``close()`` undoes the subscription. Views register listeners with
``subscribe()`` and re-derive their personalization on every change.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from application.ports.auth_port import AuthPort
from domain.session import AuthEvent, AuthResult, AuthSubscription, AuthUser, Session

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "es", "fr", "de")
DEFAULT_LANGUAGE = "en"

SessionListener = Callable[[Optional[Session]], None]


class SessionContext:
    def __init__(self, auth: AuthPort, *, language: str = DEFAULT_LANGUAGE) -> None:
        self._auth = auth
        self._session: Optional[Session] = None
        self._language = DEFAULT_LANGUAGE
        self._listeners: dict[int, SessionListener] = {}
        self._next_listener = 0
        self._subscription: Optional[AuthSubscription] = None
        self._loading = True
        self.set_language(language)

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def user(self) -> Optional[AuthUser]:
        return self._session.user if self._session else None

    @property
    def user_id(self) -> Optional[str]:
        return self._session.user.id if self._session else None

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def language(self) -> str:
        return self._language

    def set_language(self, language: str) -> None:
        code = (language or "").strip().lower()
        if code not in SUPPORTED_LANGUAGES:
            raise ValueError(f"unsupported language {language!r}; expected one of {SUPPORTED_LANGUAGES}")
        self._language = code

    async def init(self) -> Optional[Session]:
        if self._subscription is not None:
            return self._session
        self._apply(await self._auth.get_session())
        self._subscription = self._auth.on_auth_state_change(self._on_auth_event)
        self._loading = False
        return self._session

    def _on_auth_event(self, event: AuthEvent, session: Optional[Session]) -> None:
        logger.debug("session context auth event=%s signed_in=%s", event.value, session is not None)
        self._loading = False
        self._apply(session)

    def _apply(self, session: Optional[Session]) -> None:
        previous_user = self.user_id
        self._session = session
        # Token refreshes keep the same user; listeners only care about identity.
        if previous_user == self.user_id:
            return
        for listener in list(self._listeners.values()):
            try:
                listener(session)
            except Exception:
                logger.exception("session listener failed")

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register ``listener``; returns the function that removes it."""
        listener_id = self._next_listener
        self._next_listener += 1
        self._listeners[listener_id] = listener

        def _unsubscribe() -> None:
            self._listeners.pop(listener_id, None)

        return _unsubscribe

    async def sign_in(self, email: str, password: str) -> AuthResult:
        return await self._auth.sign_in(email=email, password=password)

    async def sign_up(self, email: str, password: str, username: str) -> AuthResult:
        return await self._auth.sign_up(email=email, password=password, username=username)

    async def sign_out(self) -> None:
        await self._auth.sign_out()

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._listeners.clear()
