"""User-data backend factory.

Builds the auth service and the three stores as one bundle so the Supabase
implementations share a single HTTP client (and therefore the signed-in
user's access token).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from application.ports.auth_port import AuthPort
from application.ports.profile_store_port import ProfileStorePort
from application.ports.review_store_port import ReviewStorePort
from application.ports.watchlist_store_port import WatchlistStorePort
from infrastructure.config.settings import (
    SUPABASE_ANON_KEY,
    SUPABASE_AVATAR_BUCKET,
    SUPABASE_TIMEOUT_S,
    SUPABASE_URL,
    USERDATA_PROVIDER,
)

logger = logging.getLogger(__name__)

ProviderType = Literal["supabase", "memory", ""]


@dataclass
class UserDataBackends:
    auth: AuthPort
    watchlist: WatchlistStorePort
    reviews: ReviewStorePort
    profiles: ProfileStorePort
    provider: str = "memory"

    async def close(self) -> None:
        await self.auth.close()
        await self.watchlist.close()
        await self.reviews.close()
        await self.profiles.close()


def _memory_backends() -> UserDataBackends:
    from infrastructure.userdata.in_memory import (
        InMemoryAuthService,
        InMemoryProfileStore,
        InMemoryReviewStore,
        InMemoryWatchlistStore,
    )

    profiles = InMemoryProfileStore()
    return UserDataBackends(
        auth=InMemoryAuthService(profiles),
        watchlist=InMemoryWatchlistStore(),
        reviews=InMemoryReviewStore(),
        profiles=profiles,
        provider="memory",
    )


class UserDataFactory:
    """Factory for the user-data backends selected by ``USERDATA_PROVIDER``."""

    @staticmethod
    def create(provider: ProviderType | None = None) -> UserDataBackends:
        """Create the backends for ``provider`` ('supabase', 'memory', or None for the env value).

        Raises:
            ValueError: If an unsupported provider is specified.
        """
        if provider is None:
            provider = USERDATA_PROVIDER  # type: ignore[assignment]

        provider = (provider or "").strip().lower()

        match provider:
            case "supabase":
                if not (SUPABASE_URL and SUPABASE_ANON_KEY):
                    logger.warning(
                        "USERDATA_PROVIDER=supabase but SUPABASE_URL/SUPABASE_ANON_KEY is not set; "
                        "falling back to in-memory user data"
                    )
                    return _memory_backends()

                from infrastructure.userdata.supabase_auth import SupabaseAuthService
                from infrastructure.userdata.supabase_client import SupabaseHttpClient
                from infrastructure.userdata.supabase_profile_store import SupabaseProfileStore
                from infrastructure.userdata.supabase_review_store import SupabaseReviewStore
                from infrastructure.userdata.supabase_watchlist_store import SupabaseWatchlistStore

                client = SupabaseHttpClient(
                    url=SUPABASE_URL,
                    anon_key=SUPABASE_ANON_KEY,
                    timeout_s=SUPABASE_TIMEOUT_S,
                )
                return UserDataBackends(
                    auth=SupabaseAuthService(client),
                    watchlist=SupabaseWatchlistStore(client),
                    reviews=SupabaseReviewStore(client),
                    profiles=SupabaseProfileStore(client, bucket=SUPABASE_AVATAR_BUCKET),
                    provider="supabase",
                )

            case "memory" | "":
                return _memory_backends()

            case _:
                raise ValueError(
                    f"Unsupported USERDATA_PROVIDER: {provider!r}. "
                    f"Supported values: 'supabase', 'memory'"
                )


def create_user_data(provider: ProviderType | None = None) -> UserDataBackends:
    return UserDataFactory.create(provider)
