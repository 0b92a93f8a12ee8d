import sys
from pathlib import Path

_BACKEND_ROOT = Path(__file__).resolve().parents[1] / "backend"
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))

import asyncio
import unittest
from typing import Sequence

from application.catalog.catalog_service import CatalogService
from application.recommendation.recommendation_service import RecommendationService
from application.session.session_context import SessionContext
from application.userdata.personal_data import PersonalDataClient
from application.views.movie_detail import MovieDetailView
from domain.catalog import CastMember, Genre, MediaDetail, MediaItem, PaginatedResult, Video
from domain.errors import AuthError, ProviderError
from domain.memory import ProviderReview
from infrastructure.userdata.factory import create_user_data


def _movie(mid: int) -> MediaItem:
    return MediaItem(id=mid, media_type="movie", title=f"Movie {mid}", poster_path=f"/{mid}.jpg")


class _StubProvider:
    def __init__(self) -> None:
        self.detail_gate: asyncio.Event | None = None
        self.detail_fail = False
        self.recommendation_calls = 0
        self.discover_calls = 0

    async def fetch_detail(self, media_type: str, media_id: int) -> MediaDetail:
        if self.detail_gate is not None:
            await self.detail_gate.wait()
        if self.detail_fail:
            raise ProviderError("detail down", status=500)
        return MediaDetail(item=_movie(media_id), overview="...", genres=(Genre(id=18, name="Drama"),))

    async def fetch_reviews(self, media_type: str, media_id: int) -> list[ProviderReview]:
        return [ProviderReview(id=f"r{i}", author=f"critic{i}", content="Solid", rating=7.0) for i in range(8)]

    async def fetch_credits(self, media_type: str, media_id: int) -> list[CastMember]:
        return [CastMember(id=i, name=f"Actor {i}", order=i) for i in range(15)]

    async def fetch_similar(self, media_type: str, media_id: int) -> PaginatedResult[MediaItem]:
        return PaginatedResult(items=tuple(_movie(500 + i) for i in range(10)))

    async def fetch_videos(self, media_type: str, media_id: int) -> list[Video]:
        return [
            Video(key="teaser", site="YouTube", type="Teaser"),
            Video(key="trailer", site="YouTube", type="Trailer"),
        ]

    async def fetch_recommendations(self, media_type: str, media_id: int) -> PaginatedResult[MediaItem]:
        self.recommendation_calls += 1
        return PaginatedResult(items=tuple(_movie(800 + i) for i in range(3)))

    async def discover_movies(
        self,
        *,
        genre_ids: Sequence[int],
        min_vote_count: int | None = None,
        min_vote_average: float | None = None,
        page: int = 1,
    ) -> PaginatedResult[MediaItem]:
        self.discover_calls += 1
        return PaginatedResult(items=(_movie(700), _movie(701)))


class TestMovieDetailView(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.provider = _StubProvider()
        self.backends = create_user_data("memory")
        self.personal = PersonalDataClient.from_backends(self.backends)
        self.session = SessionContext(self.backends.auth)
        await self.session.init()
        self.catalog = CatalogService(self.provider)
        self.recommendations = RecommendationService(self.provider, self.backends.watchlist)

    def _view(self, movie_id: int = 42) -> MovieDetailView:
        return MovieDetailView(
            movie_id,
            catalog=self.catalog,
            recommendations=self.recommendations,
            personal_data=self.personal,
            session=self.session,
        )

    async def test_mount_anonymous(self) -> None:
        view = self._view()
        await view.mount()

        self.assertTrue(view.mounted)
        self.assertEqual(len(view.page.reviews), 5)
        self.assertEqual(len(view.page.cast), 10)
        self.assertEqual(len(view.page.similar), 6)
        self.assertEqual(view.page.trailer.key, "trailer")
        self.assertEqual(view.recommendation_set.source, "provider")
        self.assertFalse(view.in_watchlist)
        self.assertIsNone(view.user_review)
        view.unmount()

    async def test_detail_failure_does_not_block_personalization(self) -> None:
        self.provider.detail_fail = True
        view = self._view()

        await view.mount()

        self.assertIsNone(view.page)
        self.assertIn("detail down", view.error)
        self.assertEqual(view.recommendation_set.source, "provider")
        view.unmount()

    async def test_toggle_watchlist_requires_session(self) -> None:
        view = self._view()
        await view.mount()
        with self.assertRaises(AuthError):
            await view.toggle_watchlist()
        view.unmount()

    async def test_toggle_watchlist_and_review_requery(self) -> None:
        await self.session.sign_up("v@example.com", "secret1", "viewer")
        view = self._view()
        await view.mount()

        self.assertTrue(await view.toggle_watchlist())
        self.assertTrue(view.in_watchlist)
        self.assertFalse(await view.toggle_watchlist())
        self.assertFalse(view.in_watchlist)

        entry = await view.submit_review(9, "Loved it")
        self.assertEqual(entry.rating, 9)
        self.assertEqual(view.user_review.id, entry.id)

        displays = view.reviews
        self.assertEqual(displays[0].author, "viewer")
        self.assertTrue(displays[0].is_own)
        self.assertEqual(displays[0].initial, "V")
        self.assertEqual(len(displays), 1 + 5)
        self.assertFalse(displays[1].is_own)
        view.unmount()

    async def test_session_change_rederives_personalization(self) -> None:
        view = self._view()
        await view.mount()
        self.assertFalse(view.recommendation_set.personalized)

        await self.session.sign_up("w@example.com", "secret1", "w")
        await self.personal.add_to_watchlist(self.session.user_id, 42, _movie(42))
        await self.session.sign_out()
        await self.session.sign_in("w@example.com", "secret1")
        await view.wait_for_refresh()

        self.assertTrue(view.in_watchlist)
        self.assertTrue(view.recommendation_set.personalized)
        self.assertEqual([m.id for m in view.recommendation_set.items], [700, 701])
        view.unmount()

    async def _watcher_with_movie_42(self) -> None:
        await self.session.sign_up("x@example.com", "secret1", "x")
        await self.personal.add_to_watchlist(self.session.user_id, 42, _movie(42))
        await self.session.sign_out()

    async def test_superseded_refresh_does_not_commit_after_sign_out(self) -> None:
        await self._watcher_with_movie_42()
        view = self._view()
        await view.mount()

        # The signed-in refresh stalls fetching watchlist genres.
        self.provider.detail_gate = asyncio.Event()
        await self.session.sign_in("x@example.com", "secret1")
        for _ in range(5):
            await asyncio.sleep(0)
        await self.session.sign_out()
        await view.wait_for_refresh()

        self.provider.detail_gate.set()
        for _ in range(5):
            await asyncio.sleep(0)

        self.assertIsNone(self.session.user_id)
        self.assertFalse(view.in_watchlist)
        self.assertIsNone(view.user_review)
        self.assertFalse(view.recommendation_set.personalized)
        self.assertEqual(self.provider.discover_calls, 0)
        view.unmount()

    async def test_load_for_signed_out_user_is_dropped(self) -> None:
        await self._watcher_with_movie_42()
        await self.session.sign_in("x@example.com", "secret1")
        view = self._view()
        self.provider.detail_gate = asyncio.Event()

        # Not mounted, so nothing supersedes the load; the user check alone drops it.
        load = asyncio.create_task(view.refresh_personalization())
        await asyncio.sleep(0)
        await self.session.sign_out()
        self.provider.detail_gate.set()
        await load

        self.assertFalse(view.in_watchlist)
        self.assertFalse(view.recommendation_set.personalized)

    async def test_sign_in_during_mount_rederives_personalization(self) -> None:
        await self._watcher_with_movie_42()
        self.provider.detail_gate = asyncio.Event()
        view = self._view()

        mounting = asyncio.create_task(view.mount())
        # Anonymous personalization settles while the title page is still gated.
        for _ in range(3):
            await asyncio.sleep(0)
        self.assertIsNone(view.page)
        await self.session.sign_in("x@example.com", "secret1")
        self.provider.detail_gate.set()
        await mounting
        await view.wait_for_refresh()

        self.assertTrue(view.mounted)
        self.assertIsNotNone(view.page)
        self.assertTrue(view.in_watchlist)
        self.assertTrue(view.recommendation_set.personalized)
        self.assertEqual([m.id for m in view.recommendation_set.items], [700, 701])
        view.unmount()

    async def test_results_after_unmount_are_discarded(self) -> None:
        self.provider.detail_gate = asyncio.Event()
        view = self._view()

        task = asyncio.create_task(view.mount())
        await asyncio.sleep(0)
        view.unmount()
        self.provider.detail_gate.set()
        await task

        self.assertIsNone(view.page)
        self.assertFalse(view.mounted)


if __name__ == "__main__":
    unittest.main()
