from __future__ import annotations

from infrastructure.config import settings  # noqa: F401

__all__ = ["settings"]
