"""View-model for the movie detail page.

Title data, recommendations and the user's personal state load together
and degrade independently. Personalization (watchlist membership, the
user's review, personalized recommendations) is re-derived whenever the
session user changes. Everything resolving after ``unmount()`` is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from application.catalog.catalog_service import CatalogService, TitlePage
from application.common.cancellation import CancellationToken
from application.recommendation.recommendation_service import RecommendationService
from application.session.session_context import SessionContext
from application.userdata.personal_data import PersonalDataClient
from domain.errors import AuthError, CineScopeError, ProviderError
from domain.memory import ReviewDisplay, ReviewEntry, UserReview, normalize_review
from domain.recommendation import RecommendationSet
from domain.session import Session
from infrastructure.utils import format_kv

logger = logging.getLogger(__name__)


class MovieDetailView:
    def __init__(
        self,
        movie_id: int,
        *,
        catalog: CatalogService,
        recommendations: RecommendationService,
        personal_data: PersonalDataClient,
        session: SessionContext,
    ) -> None:
        self.movie_id = int(movie_id)
        self._catalog = catalog
        self._recommendations = recommendations
        self._personal = personal_data
        self._session = session
        self._token = CancellationToken()
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._loaded = False
        # Only the newest personalization load may commit.
        self._refresh_token: Optional[CancellationToken] = None
        self._refresh_task: Optional[asyncio.Task] = None

        self.page: Optional[TitlePage] = None
        self.error: Optional[str] = None
        self.recommendation_set = RecommendationSet()
        self.in_watchlist = False
        self.user_review: Optional[ReviewEntry] = None
        self.user_reviews: list[ReviewEntry] = []

    @property
    def mounted(self) -> bool:
        return self._loaded and not self._token.cancelled

    @property
    def reviews(self) -> list[ReviewDisplay]:
        """Site reviews first (own review flagged), then provider reviews."""
        uid = self._session.user_id
        out = [normalize_review(UserReview(entry=e, is_own=e.user_id == uid)) for e in self.user_reviews]
        if self.page is not None:
            out.extend(normalize_review(r) for r in self.page.reviews)
        return out

    async def mount(self) -> None:
        token = self._token
        if token.cancelled or self._unsubscribe is not None:
            return
        # Subscribe first so a sign-in while the page loads supersedes the
        # personalization started below.
        self._unsubscribe = self._session.subscribe(self._on_session_change)
        await asyncio.gather(
            self._load_page(token),
            self._load_user_reviews(token),
            self._load_personalization(self._next_refresh_token()),
        )
        if not token.cancelled:
            self._loaded = True

    async def _load_page(self, token: CancellationToken) -> None:
        try:
            page = await self._catalog.title_page("movie", self.movie_id)
        except ProviderError as exc:
            if token.cancelled:
                return
            logger.warning("movie detail load failed %s", format_kv(movie_id=self.movie_id, error=str(exc)))
            self.error = str(exc)
            return
        if not token.cancelled:
            self.page = page

    async def _load_user_reviews(self, token: CancellationToken) -> None:
        try:
            entries = await self._personal.list_reviews_for_movie(self.movie_id)
        except CineScopeError as exc:
            logger.warning("movie reviews load failed %s", format_kv(movie_id=self.movie_id, error=str(exc)))
            return
        if not token.cancelled:
            self.user_reviews = entries

    def _next_refresh_token(self) -> CancellationToken:
        """Cancel the running personalization load and hand out a fresh token."""
        if self._refresh_token is not None:
            self._refresh_token.cancel()
        task = self._refresh_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        self._refresh_task = None
        self._refresh_token = CancellationToken()
        return self._refresh_token

    def _is_stale(self, token: CancellationToken, user_id: Optional[str]) -> bool:
        return token.cancelled or self._token.cancelled or self._session.user_id != user_id

    async def _load_personalization(self, token: CancellationToken) -> None:
        user_id = self._session.user_id
        recs_task = self._recommendations.recommend_for_movie(self.movie_id, user_id=user_id, token=token)
        if user_id is None:
            recs = await recs_task
            if self._is_stale(token, user_id):
                return
            self.recommendation_set = recs
            self.in_watchlist = False
            self.user_review = None
            return

        recs, member, own = await asyncio.gather(
            recs_task,
            self._personal.is_in_watchlist(user_id, self.movie_id),
            self._personal.get_user_review(user_id, self.movie_id),
            return_exceptions=True,
        )
        if self._is_stale(token, user_id):
            logger.debug("stale personalization dropped %s", format_kv(movie_id=self.movie_id, user_id=user_id))
            return
        if isinstance(recs, RecommendationSet):
            self.recommendation_set = recs
        for result in (recs, member, own):
            if isinstance(result, CineScopeError):
                logger.warning(
                    "movie personalization failed %s",
                    format_kv(movie_id=self.movie_id, user_id=user_id, error=str(result)),
                )
            elif isinstance(result, BaseException):
                raise result
        self.in_watchlist = member if isinstance(member, bool) else False
        self.user_review = own if isinstance(own, ReviewEntry) else None

    def _on_session_change(self, session: Optional[Session]) -> None:
        if self._token.cancelled:
            return
        token = self._next_refresh_token()
        self._refresh_task = asyncio.get_running_loop().create_task(self._load_personalization(token))

    async def refresh_personalization(self) -> None:
        """Re-derive personalization now, superseding any load in flight."""
        if self._token.cancelled:
            return
        await self._load_personalization(self._next_refresh_token())

    async def wait_for_refresh(self) -> None:
        """Wait until the latest session-driven refresh has settled."""
        task = self._refresh_task
        if task is not None and not task.done():
            await asyncio.wait([task])

    def _require_user(self) -> str:
        user_id = self._session.user_id
        if user_id is None:
            raise AuthError("sign in required")
        return user_id

    async def toggle_watchlist(self) -> bool:
        """Add or remove the movie, then re-query membership."""
        user_id = self._require_user()
        token = self._token
        if self.in_watchlist:
            await self._personal.remove_from_watchlist(user_id, self.movie_id)
        else:
            if self.page is None:
                raise ProviderError("movie details are not loaded", endpoint=f"/movie/{self.movie_id}")
            await self._personal.add_to_watchlist(user_id, self.movie_id, self.page.detail.item)
        member = await self._personal.is_in_watchlist(user_id, self.movie_id)
        if not token.cancelled:
            self.in_watchlist = member
        return member

    async def submit_review(self, rating: int, content: str) -> ReviewEntry:
        user_id = self._require_user()
        token = self._token
        snapshot = self.page.detail.item if self.page is not None else None
        entry = await self._personal.upsert_review(user_id, self.movie_id, rating, content, snapshot)
        entries = await self._personal.list_reviews_for_movie(self.movie_id)
        if not token.cancelled:
            self.user_review = entry
            self.user_reviews = entries
        return entry

    def unmount(self) -> None:
        self._token.cancel()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._refresh_token is not None:
            self._refresh_token.cancel()
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
        self._refresh_task = None
