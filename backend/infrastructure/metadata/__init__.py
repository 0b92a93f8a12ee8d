from infrastructure.metadata.tmdb_client import TMDBClient, build_image_url

__all__ = ["TMDBClient", "build_image_url"]
