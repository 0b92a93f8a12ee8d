from __future__ import annotations

import logging
from typing import Optional

from domain.session import AuthEvent, AuthStateCallback, AuthSubscription, Session

logger = logging.getLogger(__name__)


class AuthStateBroadcaster:
    """Fan-out of auth state changes to registered callbacks.

    A failing callback is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._listeners: dict[int, AuthStateCallback] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, callback: AuthStateCallback) -> AuthSubscription:
        listener_id = self._next_id
        self._next_id += 1
        self._listeners[listener_id] = callback

        def _remove() -> None:
            self._listeners.pop(listener_id, None)

        return AuthSubscription(_remove)

    def emit(self, event: AuthEvent, session: Optional[Session]) -> None:
        logger.debug("auth state change event=%s listeners=%d", event.value, len(self._listeners))
        for callback in list(self._listeners.values()):
            try:
                callback(event, session)
            except Exception:
                logger.exception("auth state listener failed event=%s", event.value)

    def clear(self) -> None:
        self._listeners.clear()
