from __future__ import annotations

from enum import Enum


class ListingCategory(str, Enum):
    """Provider listing endpoints, keyed as ``<media_type>/<list>``."""

    MOVIE_POPULAR = "movie/popular"
    MOVIE_TOP_RATED = "movie/top_rated"
    MOVIE_NOW_PLAYING = "movie/now_playing"
    MOVIE_UPCOMING = "movie/upcoming"
    MOVIE_TRENDING = "movie/trending"
    TV_POPULAR = "tv/popular"
    TV_TOP_RATED = "tv/top_rated"
    TV_ON_THE_AIR = "tv/on_the_air"
    TV_TRENDING = "tv/trending"

    @property
    def media_type(self) -> str:
        return self.value.split("/", 1)[0]

    @property
    def list_name(self) -> str:
        return self.value.split("/", 1)[1]

    @property
    def path(self) -> str:
        if self.list_name == "trending":
            return f"/trending/{self.media_type}/week"
        return f"/{self.value}"

    @property
    def paginated(self) -> bool:
        # Trending is a single weekly page.
        return self.list_name != "trending"


class SearchScope(str, Enum):
    ALL = "all"
    TITLES = "titles"
    CELEBS = "celebs"
    KEYWORDS = "keywords"

    @classmethod
    def parse(cls, raw: str | None) -> "SearchScope":
        value = (raw or "").strip().lower()
        for scope in cls:
            if scope.value == value:
                return scope
        return cls.ALL

    @property
    def includes_titles(self) -> bool:
        return self is not SearchScope.CELEBS

    @property
    def includes_people(self) -> bool:
        return self in (SearchScope.ALL, SearchScope.CELEBS)
