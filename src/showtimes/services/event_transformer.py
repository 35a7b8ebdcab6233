"""Turn raw site listings into canonical showtime events."""

import logging
from collections.abc import Callable, Iterable
from datetime import date

from showtimes.scrapers.models import CanonicalEvent, RawListing
from showtimes.utils.text import (
    absolute_url,
    clean_title,
    collapse_whitespace,
    infer_format,
    infer_tags,
)

logger = logging.getLogger(__name__)

DateParser = Callable[[object], date | None]


def _append_unique(target: list[str], values: Iterable[str]) -> None:
    for value in values:
        if value and value not in target:
            target.append(value)


class EventTransformer:
    """
    Normalises RawListings for one theatre.

    Each listing expands into one CanonicalEvent per calendar date its
    showtimes fall on. Across a whole site run, events for the same source
    title and date are merged and repeated showtimes dropped, since some
    sites print the same session in both a visible and an expanded section.
    """

    def __init__(self, theatre: str, date_parser: DateParser, base_url: str = "") -> None:
        """
        Args:
            theatre: Theatre name stamped on every event
            date_parser: Resolves the site's native date tokens to dates
            base_url: Base for resolving relative image URLs
        """
        self.theatre = theatre
        self.date_parser = date_parser
        self.base_url = base_url

    def transform(self, listing: RawListing) -> list[CanonicalEvent]:
        """Expand one listing into events, one per resolved date."""
        original_title = collapse_whitespace(listing.title)
        if not original_title:
            logger.info(f"{self.theatre}: dropping listing without a title")
            return []

        grouped: dict[date, list[tuple[str, str]]] = {}
        for showtime in listing.showtimes:
            time_text = collapse_whitespace(showtime.time)
            if not time_text:
                continue
            token = showtime.raw_date if showtime.raw_date is not None else listing.raw_date
            showing_date = self.date_parser(token)
            if showing_date is None:
                logger.debug(f"{self.theatre}: unparseable date {token!r} for {original_title!r}")
                continue
            grouped.setdefault(showing_date, []).append((time_text, showtime.attribute))

        if not grouped:
            logger.info(f"{self.theatre}: dropping {original_title!r}, no usable showtimes")
            return []

        title = clean_title(original_title) or original_title
        image_url = absolute_url(listing.image_url, self.base_url)

        events = []
        for showing_date, sessions in grouped.items():
            times: list[str] = []
            attributes = list(listing.attributes)
            _append_unique(times, (time_text for time_text, _ in sessions))
            _append_unique(attributes, (attribute for _, attribute in sessions))

            accessibility, discount = infer_tags(original_title, attributes)
            events.append(
                CanonicalEvent(
                    date=showing_date,
                    title=title,
                    original_title=original_title,
                    times=times,
                    theatre=self.theatre,
                    format=infer_format(original_title, attributes),
                    image_url=image_url,
                    accessibility=accessibility,
                    discount=discount,
                )
            )
        return events

    def transform_all(self, listings: Iterable[RawListing]) -> list[CanonicalEvent]:
        """Transform a site's listings and merge duplicates across them."""
        merged: dict[tuple[str, date], CanonicalEvent] = {}

        for listing in listings:
            try:
                events = self.transform(listing)
            except (TypeError, ValueError) as e:
                logger.warning(f"{self.theatre}: could not transform {listing.title!r}: {e}")
                continue

            for event in events:
                key = (event.original_title, event.date)
                existing = merged.get(key)
                if existing is None:
                    merged[key] = event
                    continue
                _append_unique(existing.times, event.times)
                _append_unique(existing.accessibility, event.accessibility)
                _append_unique(existing.discount, event.discount)
                if not existing.image_url:
                    existing.image_url = event.image_url
                if existing.format == "Digital":
                    existing.format = event.format

        return list(merged.values())
