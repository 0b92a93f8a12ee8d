from domain.session.auth import (
    AuthEvent,
    AuthResult,
    AuthStateCallback,
    AuthSubscription,
    AuthUser,
    Session,
)

__all__ = [
    "AuthEvent",
    "AuthResult",
    "AuthStateCallback",
    "AuthSubscription",
    "AuthUser",
    "Session",
]
