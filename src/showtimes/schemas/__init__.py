"""Pydantic schemas for API requests and responses."""

from showtimes.schemas.movie_event import MovieEventResponse

__all__ = ["MovieEventResponse"]
