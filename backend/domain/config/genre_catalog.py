from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from domain.catalog.detail import Genre

_DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "genres.yaml"
_CATALOG_CACHE: Dict[str, Any] | None = None
GENRE_CATALOG_PATH_ENV = "GENRE_CATALOG_PATH"
GENRE_CATALOG_RELOAD_ENV = "GENRE_CATALOG_RELOAD"
_FALLBACK_NAMES = {"movie": "Movies", "tv": "TV Shows"}


def _load_catalog(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return data if isinstance(data, dict) else {}


def _normalize_genres(raw: Any) -> List[Genre]:
    if not isinstance(raw, list):
        return []
    out: List[Genre] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            gid = int(entry.get("id"))
        except (TypeError, ValueError):
            continue
        name = str(entry.get("name") or "").strip()
        if name:
            out.append(Genre(id=gid, name=name))
    return out


def _normalize_catalog(data: Dict[str, Any]) -> Dict[str, Any]:
    genres = data.get("genres", {})
    if not isinstance(genres, dict):
        genres = {}
    excludes = data.get("showcase_exclude", {})
    if not isinstance(excludes, dict):
        excludes = {}

    normalized: Dict[str, Any] = {"genres": {}, "showcase_exclude": {}}
    for media_type in ("movie", "tv"):
        normalized["genres"][media_type] = _normalize_genres(genres.get(media_type))
        raw_ex = excludes.get(media_type) or []
        ids: set[int] = set()
        if isinstance(raw_ex, list):
            for v in raw_ex:
                try:
                    ids.add(int(v))
                except (TypeError, ValueError):
                    continue
        normalized["showcase_exclude"][media_type] = ids
    return normalized


def _resolve_catalog_path(path: Path | None) -> Path:
    if path is not None:
        return path
    env_path = os.getenv(GENRE_CATALOG_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return _DEFAULT_CATALOG_PATH


def _should_reload(reload: bool | None) -> bool:
    if reload is not None:
        return reload
    env_value = os.getenv(GENRE_CATALOG_RELOAD_ENV, "").strip().lower()
    return env_value in {"1", "true", "yes", "on"}


def load_genre_catalog(path: Path | None = None) -> Dict[str, Any]:
    resolved_path = _resolve_catalog_path(path)
    return _normalize_catalog(_load_catalog(resolved_path))


def get_genre_catalog(
    reload: bool | None = None,
    path: Path | None = None,
) -> Dict[str, Any]:
    global _CATALOG_CACHE
    if _CATALOG_CACHE is None or _should_reload(reload):
        _CATALOG_CACHE = load_genre_catalog(path)
    return _CATALOG_CACHE


def list_genres(media_type: str, *, showcase: bool = False) -> List[Genre]:
    catalog = get_genre_catalog()
    genres = list(catalog["genres"].get(media_type, []))
    if showcase:
        excluded = catalog["showcase_exclude"].get(media_type, set())
        genres = [g for g in genres if g.id not in excluded]
    return genres


def genre_name(genre_id: int, media_type: str) -> str:
    """Display name for a genre id; unknown ids get a generic section title."""
    for g in list_genres(media_type):
        if g.id == int(genre_id):
            return g.name
    return _FALLBACK_NAMES.get(media_type, "Movies")


def find_genre(genre_id: int, media_type: str) -> Optional[Genre]:
    for g in list_genres(media_type):
        if g.id == int(genre_id):
            return g
    return None


__all__ = [
    "load_genre_catalog",
    "get_genre_catalog",
    "list_genres",
    "genre_name",
    "find_genre",
    "GENRE_CATALOG_PATH_ENV",
    "GENRE_CATALOG_RELOAD_ENV",
]
