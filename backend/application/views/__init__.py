from application.views.movie_detail import MovieDetailView

__all__ = ["MovieDetailView"]
