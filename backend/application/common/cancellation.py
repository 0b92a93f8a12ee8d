from __future__ import annotations

import asyncio


class CancellationToken:
    """One per listing session / view mount.

    Async work checks the token before committing state; a cancelled token
    never becomes live again.
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise asyncio.CancelledError("cancellation token was cancelled")
