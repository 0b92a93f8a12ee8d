from application.ports.auth_port import AuthPort
from application.ports.metadata_provider_port import MetadataProviderPort
from application.ports.profile_store_port import ProfileStorePort
from application.ports.review_store_port import ReviewStorePort
from application.ports.watchlist_store_port import WatchlistStorePort

__all__ = [
    "AuthPort",
    "MetadataProviderPort",
    "ProfileStorePort",
    "ReviewStorePort",
    "WatchlistStorePort",
]
