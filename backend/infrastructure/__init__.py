from __future__ import annotations

"""
Infrastructure layer.

Concrete adapters behind the application ports: the TMDB HTTP client, the
Supabase user-data clients, in-memory stores, settings and logging helpers.
"""

__all__ = [
    "config",
    "metadata",
    "userdata",
    "utils",
]
