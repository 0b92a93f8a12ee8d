from application.catalog.aggregation import merge_pages
from application.catalog.catalog_service import (
    ActorPage,
    CatalogService,
    GenreTile,
    HomePage,
    TitlePage,
    WatchProvidersView,
)
from application.catalog.listing_controller import ListingController
from application.catalog.search_service import SearchService, run_search

__all__ = [
    "merge_pages",
    "ActorPage",
    "CatalogService",
    "GenreTile",
    "HomePage",
    "TitlePage",
    "WatchProvidersView",
    "ListingController",
    "SearchService",
    "run_search",
]
