from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from application.catalog.catalog_service import CatalogService
from application.ports.metadata_provider_port import MetadataProviderPort
from application.recommendation.recommendation_service import RecommendationService
from application.session.session_context import DEFAULT_LANGUAGE, SessionContext
from application.userdata.personal_data import PersonalDataClient
from application.views.movie_detail import MovieDetailView
from infrastructure.logging_setup import configure_logging
from infrastructure.userdata.factory import UserDataBackends, create_user_data

logger = logging.getLogger(__name__)


@dataclass
class CatalogApp:
    """Wired services sharing one metadata client and one user-data bundle."""

    metadata: MetadataProviderPort
    user_data: UserDataBackends
    catalog: CatalogService
    recommendations: RecommendationService
    personal_data: PersonalDataClient
    session: SessionContext

    def movie_detail(self, movie_id: int) -> MovieDetailView:
        return MovieDetailView(
            movie_id,
            catalog=self.catalog,
            recommendations=self.recommendations,
            personal_data=self.personal_data,
            session=self.session,
        )

    async def close(self) -> None:
        self.session.close()
        await self.metadata.close()
        await self.user_data.close()


async def bootstrap_app(
    *,
    userdata_provider: Optional[str] = None,
    metadata: Optional[MetadataProviderPort] = None,
    language: str = DEFAULT_LANGUAGE,
    log_level: Optional[str] = None,
) -> CatalogApp:
    """Build every service and read the current session.

    ``metadata`` defaults to a ``TMDBClient`` built from settings.
    """
    configure_logging(log_level)

    if metadata is None:
        from infrastructure.metadata.tmdb_client import TMDBClient

        metadata = TMDBClient()

    user_data = create_user_data(userdata_provider)  # type: ignore[arg-type]
    session = SessionContext(user_data.auth, language=language)
    app = CatalogApp(
        metadata=metadata,
        user_data=user_data,
        catalog=CatalogService(metadata),
        recommendations=RecommendationService(metadata, user_data.watchlist),
        personal_data=PersonalDataClient.from_backends(user_data),
        session=session,
    )
    await session.init()
    logger.info(
        "catalog app ready userdata=%s language=%s signed_in=%s",
        user_data.provider,
        session.language,
        session.user_id is not None,
    )
    return app


__all__ = ["CatalogApp", "bootstrap_app"]
