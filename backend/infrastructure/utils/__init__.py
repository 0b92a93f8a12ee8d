from __future__ import annotations

from infrastructure.utils.event_logger import EventLogger  # noqa: F401
from infrastructure.utils.log_format import format_kv  # noqa: F401

__all__ = [
    "EventLogger",
    "format_kv",
]
