"""MovieEvent model: one film's showtimes at one theatre on one day."""

import datetime

from sqlalchemy import Date, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from showtimes.models.base import Base, TimestampMixin
from showtimes.scrapers.models import CanonicalEvent


class MovieEvent(Base, TimestampMixin):
    """
    Persisted CanonicalEvent.

    Rows are replaced wholesale per theatre on every scrape, so there is no
    uniqueness constraint on (theatre, date, title).
    """

    __tablename__ = "movie_events"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    original_title: Mapped[str] = mapped_column(Text, nullable=False)
    times: Mapped[list[str]] = mapped_column(ARRAY(String(50)), nullable=False)
    format: Mapped[str] = mapped_column(String(20), nullable=False, default="Digital")
    image_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    theatre: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    accessibility: Mapped[list[str]] = mapped_column(ARRAY(String(100)), nullable=False, default=list)
    discount: Mapped[list[str]] = mapped_column(ARRAY(String(100)), nullable=False, default=list)

    @classmethod
    def from_canonical(cls, event: CanonicalEvent) -> "MovieEvent":
        return cls(
            date=event.date,
            title=event.title,
            original_title=event.original_title,
            times=list(event.times),
            format=event.format,
            image_url=event.image_url or "",
            theatre=event.theatre,
            accessibility=list(event.accessibility),
            discount=list(event.discount),
        )

    def __repr__(self) -> str:
        return (
            f"<MovieEvent(theatre={self.theatre!r}, "
            f"date={self.date}, "
            f"title={self.title!r})>"
        )
