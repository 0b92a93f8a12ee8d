import sys
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

import unittest

from application.catalog.catalog_service import CatalogService
from domain.catalog import (
    ListingCategory,
    ListingPhase,
    MediaItem,
    PaginatedResult,
    Person,
    PersonDetail,
    RegionProviders,
    WatchProvider,
)
from domain.config import genre_catalog
from domain.config.genre_catalog import list_genres
from domain.errors import ProviderError


def _items(prefix: int, n: int, media_type: str = "movie") -> tuple[MediaItem, ...]:
    return tuple(
        MediaItem(id=prefix + i, media_type=media_type, title=f"T{prefix + i}", poster_path="/p.jpg", backdrop_path=f"/b{prefix + i}.jpg")
        for i in range(n)
    )


class _StubProvider:
    def __init__(self) -> None:
        self.listing_calls: list[tuple[str, int]] = []
        self.failing_genres: set[int] = set()
        self.empty_genres: set[int] = set()
        self.providers: dict[str, RegionProviders] = {}

    async def fetch_listing(self, category: ListingCategory, page: int = 1) -> PaginatedResult[MediaItem]:
        category = ListingCategory(category)
        self.listing_calls.append((category.value, page))
        return PaginatedResult(items=_items(page * 100, 20, category.media_type), page=page, total_pages=10)

    async def fetch_by_genre(self, genre_id: int, media_type: str = "movie", page: int = 1) -> PaginatedResult[MediaItem]:
        if genre_id in self.failing_genres:
            raise ProviderError("discover down", status=500)
        if genre_id in self.empty_genres:
            return PaginatedResult(items=())
        return PaginatedResult(items=_items(genre_id, 3, media_type), page=page, total_pages=2)

    async def fetch_person(self, person_id: int) -> PersonDetail:
        return PersonDetail(person=Person(id=person_id, name="Keanu Reeves", profile_path="/k.jpg"))

    async def fetch_person_movie_credits(self, person_id: int) -> list[MediaItem]:
        credits = [
            MediaItem(id=i, media_type="movie", title=f"C{i}", poster_path="/c.jpg" if i % 5 else None, popularity=float(i))
            for i in range(30)
        ]
        return credits

    async def fetch_watch_providers(self, media_type: str, media_id: int) -> dict[str, RegionProviders]:
        return self.providers

    async def fetch_popular_people(self, page: int = 1) -> PaginatedResult[Person]:
        return PaginatedResult(
            items=(Person(id=1, name="A", profile_path="/a.jpg"), Person(id=2, name="B")),
            page=page,
            total_pages=3,
        )

    async def search_people(self, query: str) -> PaginatedResult[Person]:
        return PaginatedResult(items=(Person(id=3, name=query, profile_path="/q.jpg"),))

    def image_url(self, path, size: str = "w500") -> str:
        return f"img:{size}{path}" if path else "placeholder"


class TestCatalogService(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        genre_catalog._CATALOG_CACHE = None
        self.provider = _StubProvider()
        self.service = CatalogService(self.provider, large_list_pages=5, large_list_limit=100)

    async def test_home_slices_trending_and_popular(self) -> None:
        home = await self.service.home()

        self.assertEqual(len(home.trending), 6)
        self.assertEqual(len(home.popular), 12)
        self.assertIn(("movie/trending", 1), self.provider.listing_calls)

    async def test_tv_home_merges_two_popular_pages(self) -> None:
        home = await self.service.tv_home()

        self.assertEqual(len(home.popular), 40)
        self.assertEqual(home.popular[0].id, 100)
        self.assertEqual(home.popular[20].id, 200)
        self.assertTrue(all(m.media_type == "tv" for m in home.trending))

    async def test_actor_page_sorts_and_filters_credits(self) -> None:
        page = await self.service.actor_page(6384)

        self.assertEqual(page.detail.person.name, "Keanu Reeves")
        self.assertEqual(len(page.credits), 20)
        self.assertTrue(all(c.poster_path for c in page.credits))
        pops = [c.popularity for c in page.credits]
        self.assertEqual(pops, sorted(pops, reverse=True))
        self.assertEqual(page.credits[0].id, 29)

    async def test_genre_showcase_isolates_failing_genres(self) -> None:
        genres = list_genres("movie", showcase=True)
        self.provider.failing_genres = {genres[0].id}
        self.provider.empty_genres = {genres[1].id}

        with self.assertLogs("application.catalog.catalog_service", level="WARNING"):
            tiles = await self.service.genre_showcase("movie")

        self.assertEqual([t.genre.id for t in tiles], [g.id for g in genres])
        self.assertNotIn(10770, [t.genre.id for t in tiles])
        self.assertIsNone(tiles[0].image_url)
        self.assertIsNone(tiles[1].image_url)
        self.assertEqual(tiles[2].image_url, f"img:w780/b{genres[2].id}.jpg")

    async def test_watch_providers_prefers_requested_then_us(self) -> None:
        self.provider.providers = {
            "US": RegionProviders(
                link="https://example.test/us",
                flatrate=(
                    WatchProvider(provider_id=8, provider_name="Netflix"),
                    WatchProvider(provider_id=1796, provider_name="Netflix basic with Ads"),
                ),
            ),
            "GB": RegionProviders(rent=(WatchProvider(provider_id=2, provider_name="Apple TV"),)),
        }

        us = await self.service.watch_providers("movie", 1)
        gb = await self.service.watch_providers("movie", 1, region="GB")
        fallback = await self.service.watch_providers("movie", 1, region="JP")

        self.assertEqual(us.region, "US")
        self.assertEqual(us.regions, ("GB", "US"))
        self.assertEqual([p.provider_id for p in us.flatrate], [8])
        self.assertEqual(gb.region, "GB")
        self.assertFalse(gb.is_empty)
        self.assertEqual(fallback.region, "US")

        self.provider.providers = {}
        self.assertIsNone(await self.service.watch_providers("movie", 1))

    async def test_listing_controllers_are_wired_to_the_provider(self) -> None:
        listing = self.service.listing(ListingCategory.TV_TOP_RATED)
        await listing.start()
        self.assertEqual(self.provider.listing_calls[-1], ("tv/top_rated", 1))
        self.assertEqual(listing.state.phase, ListingPhase.READY)

        genre = self.service.genre_listing(878)
        await genre.start()
        self.assertEqual([m.id for m in genre.state.items], [878, 879, 880])

    async def test_people_listing_filters_and_searches(self) -> None:
        people = self.service.people_listing()

        await people.start()
        self.assertEqual([p.id for p in people.state.items], [1])
        self.assertTrue(people.state.has_more)

        await people.search("Zendaya")
        self.assertTrue(people.state.search_mode)
        self.assertEqual([p.name for p in people.state.items], ["Zendaya"])


if __name__ == "__main__":
    unittest.main()
