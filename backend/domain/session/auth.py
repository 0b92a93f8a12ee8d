from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional


class AuthEvent(str, Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str
    username: Optional[str] = None


@dataclass(frozen=True)
class Session:
    user: AuthUser
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class AuthResult:
    """Outcome of sign-up/sign-in; ``session`` is None while email confirmation is pending."""

    user: AuthUser
    session: Optional[Session] = None


AuthStateCallback = Callable[[AuthEvent, Optional[Session]], None]


class AuthSubscription:
    """Handle returned by ``on_auth_state_change``; ``unsubscribe`` is idempotent."""

    def __init__(self, unsubscribe: Callable[[], None]) -> None:
        self._unsubscribe = unsubscribe
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._unsubscribe()
