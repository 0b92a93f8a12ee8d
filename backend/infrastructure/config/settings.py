import os
import warnings
from typing import Optional

from dotenv import load_dotenv

# The project-root .env is the primary development config source and wins over
# the shell environment, so edits to .env always take effect.
load_dotenv(override=True)


def _get_env_int(key: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be an integer, got {raw}") from exc


def _get_env_float(key: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be a number, got {raw}") from exc


def _get_env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    return raw.lower() in {"1", "true", "yes", "y", "on"}


# ===== Logging =====

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"


# ===== TMDB (metadata provider) =====

TMDB_BASE_URL = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3").strip()
TMDB_API_TOKEN = os.getenv("TMDB_API_TOKEN", "").strip()
TMDB_API_KEY = os.getenv("TMDB_API_KEY", "").strip()
TMDB_TIMEOUT_S = _get_env_float("TMDB_TIMEOUT_S", 10.0) or 10.0
TMDB_LANGUAGE = os.getenv("TMDB_LANGUAGE", "en-US").strip() or "en-US"
TMDB_IMAGE_BASE_URL = os.getenv("TMDB_IMAGE_BASE_URL", "https://image.tmdb.org/t/p").strip().rstrip("/")
IMAGE_PLACEHOLDER = os.getenv("IMAGE_PLACEHOLDER", "/placeholder.jpg").strip() or "/placeholder.jpg"


# ===== Supabase (hosted user data) =====

# Provider selection: supabase or memory
USERDATA_PROVIDER = os.getenv("USERDATA_PROVIDER", "supabase").strip().lower()

SUPABASE_URL = os.getenv("SUPABASE_URL", "").strip().rstrip("/")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "").strip()
SUPABASE_TIMEOUT_S = _get_env_float("SUPABASE_TIMEOUT_S", 10.0) or 10.0
SUPABASE_AVATAR_BUCKET = os.getenv("SUPABASE_AVATAR_BUCKET", "avatars").strip() or "avatars"
AVATAR_MAX_BYTES = _get_env_int("AVATAR_MAX_BYTES", 2 * 1024 * 1024) or 2 * 1024 * 1024


# ===== Listings / infinite scroll =====

SCROLL_THRESHOLD_PX = _get_env_float("SCROLL_THRESHOLD_PX", 200.0)
if SCROLL_THRESHOLD_PX is None or SCROLL_THRESHOLD_PX < 0:
    warnings.warn(
        "SCROLL_THRESHOLD_PX must be a non-negative number; using default.",
        RuntimeWarning,
        stacklevel=2,
    )
    SCROLL_THRESHOLD_PX = 200.0

# "Large list" pages (fan favourites, top rated): N pages merged then truncated.
LARGE_LIST_PAGES = _get_env_int("LARGE_LIST_PAGES", 5) or 5
LARGE_LIST_LIMIT = _get_env_int("LARGE_LIST_LIMIT", 100) or 100


# ===== Recommendations =====

RECOMMENDATION_WATCHLIST_SAMPLE = _get_env_int("RECOMMENDATION_WATCHLIST_SAMPLE", 5) or 5
RECOMMENDATION_MAX_GENRES = _get_env_int("RECOMMENDATION_MAX_GENRES", 3) or 3
RECOMMENDATION_LIMIT = _get_env_int("RECOMMENDATION_LIMIT", 12) or 12
RECOMMENDATION_MIN_VOTE_COUNT = _get_env_int("RECOMMENDATION_MIN_VOTE_COUNT", 100)
RECOMMENDATION_MIN_VOTE_AVERAGE = _get_env_float("RECOMMENDATION_MIN_VOTE_AVERAGE", 6.5)
