"""SQLAlchemy ORM models."""

from showtimes.models.base import Base
from showtimes.models.movie_event import MovieEvent

__all__ = ["Base", "MovieEvent"]
