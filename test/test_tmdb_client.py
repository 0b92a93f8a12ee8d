import sys
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

import asyncio
import json
import unittest
from typing import Any

import aiohttp

from domain.catalog import ListingCategory
from domain.errors import ProviderError
from infrastructure.metadata.tmdb_client import TMDBClient, build_image_url


class _FakeResponse:
    def __init__(self, status: int, body: Any) -> None:
        self.status = status
        self._body = body

    async def text(self) -> str:
        return self._body if isinstance(self._body, str) else json.dumps(self._body)

    async def json(self, content_type: str | None = None) -> Any:
        if isinstance(self._body, str):
            return json.loads(self._body)
        return self._body

    async def __aenter__(self) -> "_FakeResponse":
        return self

    async def __aexit__(self, *exc: object) -> None:
        return None


class _FakeSession:
    """Records GETs and answers from a path -> (status, body) table."""

    def __init__(self, routes: dict[str, tuple[int, Any]] | None = None, error: BaseException | None = None) -> None:
        self.routes = routes or {}
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def get(self, url: str, *, params: dict[str, Any], headers: dict[str, str]) -> _FakeResponse:
        self.calls.append({"url": url, "params": dict(params), "headers": dict(headers)})
        if self.error is not None:
            raise self.error
        for path, (status, body) in self.routes.items():
            if url.endswith(path):
                return _FakeResponse(status, body)
        return _FakeResponse(404, {"status_message": "not found"})

    async def close(self) -> None:
        self.closed = True


def _client(session: _FakeSession, **kwargs: Any) -> TMDBClient:
    opts = {"base_url": "https://api.example.test/3", "api_token": "tok", "language": "en-US"}
    opts.update(kwargs)
    client = TMDBClient(**opts)
    client._session = session
    return client


def _page(results: list[dict[str, Any]], page: int = 1, total_pages: int = 3) -> dict[str, Any]:
    return {"page": page, "results": results, "total_pages": total_pages, "total_results": len(results)}


class TestTmdbClientRequests(unittest.IsolatedAsyncioTestCase):
    async def test_listing_parses_page_and_sends_bearer(self) -> None:
        session = _FakeSession(
            {
                "/movie/popular": (
                    200,
                    _page(
                        [
                            {"id": 1, "title": "Heat", "poster_path": "/h.jpg", "release_date": "1995-12-15"},
                            {"id": 2, "title": "Blank", "poster_path": "", "vote_average": None},
                        ],
                        page=2,
                    ),
                )
            }
        )
        client = _client(session)

        page = await client.fetch_listing(ListingCategory.MOVIE_POPULAR, 2)

        self.assertEqual([m.id for m in page.items], [1, 2])
        self.assertEqual(page.items[0].release_year, 1995)
        self.assertIsNone(page.items[1].poster_path)
        self.assertEqual(page.items[1].vote_average, 0.0)
        self.assertTrue(page.has_more)
        call = session.calls[0]
        self.assertEqual(call["url"], "https://api.example.test/3/movie/popular")
        self.assertEqual(call["params"]["page"], 2)
        self.assertEqual(call["params"]["language"], "en-US")
        self.assertNotIn("api_key", call["params"])
        self.assertEqual(call["headers"]["Authorization"], "Bearer tok")

    async def test_api_key_used_without_token(self) -> None:
        session = _FakeSession({"/trending/tv/week": (200, _page([{"id": 5, "name": "Show"}], total_pages=1))})
        client = _client(session, api_token="", api_key="k3y")
        # Settings may carry a token from the environment.
        client._api_token = ""

        page = await client.fetch_listing(ListingCategory.TV_TRENDING)

        self.assertEqual(page.items[0].title, "Show")
        self.assertEqual(page.items[0].media_type, "tv")
        self.assertFalse(page.has_more)
        call = session.calls[0]
        self.assertEqual(call["params"]["api_key"], "k3y")
        self.assertNotIn("page", call["params"])
        self.assertNotIn("Authorization", call["headers"])

    async def test_empty_search_has_no_more_pages(self) -> None:
        session = _FakeSession({"/search/movie": (200, _page([], total_pages=0))})
        client = _client(session)

        page = await client.search_movies("zzzz")

        self.assertTrue(page.is_empty)
        self.assertEqual(page.total_pages, 1)
        self.assertFalse(page.has_more)
        self.assertEqual(session.calls[0]["params"]["query"], "zzzz")

    async def test_discover_joins_genres_and_vote_floors(self) -> None:
        session = _FakeSession({"/discover/movie": (200, _page([{"id": 9, "title": "X"}]))})
        client = _client(session)

        await client.discover_movies(genre_ids=[28, 12], min_vote_count=100, min_vote_average=6.5)

        params = session.calls[0]["params"]
        self.assertEqual(params["with_genres"], "28,12")
        self.assertEqual(params["vote_count.gte"], 100)
        self.assertEqual(params["vote_average.gte"], 6.5)
        self.assertEqual(params["sort_by"], "popularity.desc")

    async def test_detail_fills_genre_ids_from_genre_objects(self) -> None:
        session = _FakeSession(
            {
                "/movie/157336": (
                    200,
                    {
                        "id": 157336,
                        "title": "Interstellar",
                        "overview": "Space.",
                        "genres": [{"id": 12, "name": "Adventure"}, {"id": 18, "name": "Drama"}],
                        "runtime": 169,
                        "tagline": "",
                    },
                )
            }
        )
        client = _client(session)

        detail = await client.fetch_detail("movie", 157336)

        self.assertEqual(detail.item.genre_ids, (12, 18))
        self.assertEqual(detail.genre_ids, (12, 18))
        self.assertEqual(detail.runtime, 169)
        self.assertIsNone(detail.tagline)

    async def test_credits_sorted_by_billing_order(self) -> None:
        session = _FakeSession(
            {
                "/movie/1/credits": (
                    200,
                    {"cast": [{"id": 2, "name": "B", "order": 1}, {"id": 1, "name": "A", "order": 0}]},
                )
            }
        )
        client = _client(session)

        cast = await client.fetch_credits("movie", 1)

        self.assertEqual([c.name for c in cast], ["A", "B"])

    async def test_watch_providers_by_region(self) -> None:
        session = _FakeSession(
            {
                "/movie/1/watch/providers": (
                    200,
                    {
                        "results": {
                            "US": {
                                "link": "https://example.test/watch",
                                "flatrate": [{"provider_id": 8, "provider_name": "Netflix"}],
                            }
                        }
                    },
                )
            }
        )
        client = _client(session)

        providers = await client.fetch_watch_providers("movie", 1)

        self.assertEqual(list(providers), ["US"])
        self.assertEqual(providers["US"].flatrate[0].provider_name, "Netflix")


class TestTmdbClientErrors(unittest.IsolatedAsyncioTestCase):
    async def test_http_error_maps_to_provider_error(self) -> None:
        for status in (401, 404, 500, 503):
            session = _FakeSession({"/movie/popular": (status, {"status_message": "nope"})})
            client = _client(session)
            with self.assertRaises(ProviderError) as ctx:
                await client.fetch_listing(ListingCategory.MOVIE_POPULAR)
            self.assertEqual(ctx.exception.status, status)
            self.assertEqual(ctx.exception.endpoint, "/movie/popular")

    async def test_timeout_and_transport_errors(self) -> None:
        for error in (asyncio.TimeoutError(), aiohttp.ClientConnectionError("reset")):
            client = _client(_FakeSession(error=error))
            with self.assertRaises(ProviderError):
                await client.fetch_detail("movie", 1)

    async def test_non_json_and_unexpected_payloads(self) -> None:
        client = _client(_FakeSession({"/movie/1": (200, "<html>oops</html>")}))
        with self.assertRaises(ProviderError):
            await client.fetch_detail("movie", 1)

        client = _client(_FakeSession({"/movie/1": (200, [1, 2, 3])}))
        with self.assertRaises(ProviderError):
            await client.fetch_detail("movie", 1)

    async def test_validation_failure_maps_to_provider_error(self) -> None:
        client = _client(_FakeSession({"/movie/popular": (200, _page([{"title": "no id"}]))}))
        with self.assertRaises(ProviderError):
            await client.fetch_listing(ListingCategory.MOVIE_POPULAR)

    async def test_unconfigured_client_never_sends(self) -> None:
        session = _FakeSession()
        client = _client(session, api_token="", api_key="")
        client._api_token = ""
        client._api_key = ""

        self.assertFalse(client.configured)
        with self.assertRaises(ProviderError):
            await client.search_people("pacino")
        self.assertEqual(session.calls, [])

    async def test_unsupported_media_type(self) -> None:
        client = _client(_FakeSession())
        with self.assertRaises(ValueError):
            await client.fetch_detail("anime", 1)

    async def test_close_resets_session(self) -> None:
        session = _FakeSession()
        client = _client(session)
        await client.close()
        self.assertTrue(session.closed)
        self.assertIsNone(client._session)


class TestImageUrl(unittest.TestCase):
    def test_build_image_url(self) -> None:
        self.assertEqual(
            build_image_url("/abc.jpg", "w780", base_url="https://img.test/t/p/", placeholder="/none.png"),
            "https://img.test/t/p/w780/abc.jpg",
        )
        self.assertEqual(
            build_image_url("abc.jpg", base_url="https://img.test/t/p", placeholder="/none.png"),
            "https://img.test/t/p/w500/abc.jpg",
        )
        for missing in (None, "", "   "):
            self.assertEqual(build_image_url(missing, placeholder="/none.png"), "/none.png")

    def test_client_image_url_uses_configured_base(self) -> None:
        client = TMDBClient(base_url="https://api.test/3", image_base_url="https://img.test/p", placeholder="/ph.png")
        self.assertEqual(client.image_url("/x.jpg", "w185"), "https://img.test/p/w185/x.jpg")
        self.assertEqual(client.image_url(None), "/ph.png")


if __name__ == "__main__":
    unittest.main()
