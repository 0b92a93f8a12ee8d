from __future__ import annotations

from typing import Optional, Protocol

from domain.session import AuthResult, AuthStateCallback, AuthSubscription, Session


class AuthPort(Protocol):
    """Account sign-up/sign-in plus the single source of the current session.

    Failures raise ``AuthError`` carrying the server's message.
    """

    async def sign_up(self, *, email: str, password: str, username: str) -> AuthResult:
        ...

    async def sign_in(self, *, email: str, password: str) -> AuthResult:
        ...

    async def sign_out(self) -> None:
        ...

    async def get_session(self) -> Optional[Session]:
        ...

    def on_auth_state_change(self, callback: AuthStateCallback) -> AuthSubscription:
        ...

    async def close(self) -> None:
        ...
