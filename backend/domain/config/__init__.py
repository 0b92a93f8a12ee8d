from domain.config.genre_catalog import (
    GENRE_CATALOG_PATH_ENV,
    GENRE_CATALOG_RELOAD_ENV,
    find_genre,
    genre_name,
    get_genre_catalog,
    list_genres,
    load_genre_catalog,
)

__all__ = [
    "get_genre_catalog",
    "load_genre_catalog",
    "list_genres",
    "genre_name",
    "find_genre",
    "GENRE_CATALOG_PATH_ENV",
    "GENRE_CATALOG_RELOAD_ENV",
]
