from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        # Quote strings so spaces/symbols stay readable and unambiguous
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return json.dumps(sorted(value, key=str), ensure_ascii=False, default=str)
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return json.dumps(str(value), ensure_ascii=False)


def format_kv(**fields: Any) -> str:
    """
    Render a compact single-line key=value log string.

    Example:
      listing="movie/popular" page=3 appended=18 has_more=true
    """
    items: Iterable[tuple[str, Any]] = fields.items()
    parts: list[str] = []
    for key, value in items:
        if value is None:
            continue
        parts.append(f"{key}={_format_value(value)}")
    return " ".join(parts)
