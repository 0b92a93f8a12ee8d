from __future__ import annotations

from typing import Optional


class CineScopeError(Exception):
    """Base class for errors raised by the catalog/personal-data layers."""


class ProviderError(CineScopeError):
    """Any metadata-provider failure (network, non-2xx, malformed payload)."""

    def __init__(self, message: str, *, status: Optional[int] = None, endpoint: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.endpoint = endpoint


class AuthError(CineScopeError):
    """Sign-in/sign-up/session failures, and 401/403 from the user-data store."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class UserDataError(CineScopeError):
    """User-data store failure that is neither auth-related nor a missing row."""

    def __init__(self, message: str, *, status: Optional[int] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
