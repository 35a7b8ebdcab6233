"""Laurelhurst Theater scraper.

The site renders its schedule from two page globals, ``window.gbl_movies``
and ``window.gbl_dates``. Rather than scraping the DOM, the scraper reads
``gbl_movies`` straight out of the page context and validates it here::

    {"123": {"title": "Keeper (open caption)",
             "posterURL": "https://...?a=1&amp;b=2",
             "schedule": {"20251118": [{"timeStr": "7:00pm"}, ...]}}}

Schedule keys are YYYYMMDD strings.
"""

import logging
from collections.abc import Iterable

from showtimes.scrapers.base import BaseScraper, ScrapeError
from showtimes.scrapers.browser import BrowserSession
from showtimes.scrapers.models import RawListing, RawShowtime

logger = logging.getLogger(__name__)

BASE_URL = "https://www.laurelhursttheater.com"

READY_CONDITION = "() => Boolean(window.gbl_movies && window.gbl_dates)"
READ_GLOBALS = "() => ({ movies: window.gbl_movies, dates: window.gbl_dates })"


def _iter_movies(movies: object) -> Iterable[object]:
    if isinstance(movies, dict):
        return movies.values()
    if isinstance(movies, list):
        return movies
    return []


def _showtime_text(entry: object) -> str:
    if isinstance(entry, dict):
        return str(entry.get("timeStr") or "").strip()
    if isinstance(entry, str):
        return entry.strip()
    return ""


def _parse_movie(movie: object) -> RawListing | None:
    if not isinstance(movie, dict):
        return None
    title = str(movie.get("title") or "").strip()
    if not title:
        return None

    schedule = movie.get("schedule")
    if not isinstance(schedule, dict):
        return None

    showtimes = []
    for date_key, entries in schedule.items():
        if not isinstance(entries, list):
            continue
        for entry in entries:
            time_text = _showtime_text(entry)
            if time_text:
                showtimes.append(RawShowtime(time=time_text, raw_date=str(date_key)))
    if not showtimes:
        return None

    return RawListing(
        title=title,
        showtimes=showtimes,
        image_url=movie.get("posterURL") or None,
    )


def parse_structured(movies: object) -> list[RawListing]:
    """Turn the untyped ``gbl_movies`` object into listings, skipping bad entries."""
    listings = []
    for movie in _iter_movies(movies):
        try:
            listing = _parse_movie(movie)
        except Exception as e:
            logger.warning(f"Laurelhurst: error parsing movie entry: {e}")
            continue
        if listing:
            listings.append(listing)
        else:
            logger.debug(f"Laurelhurst: skipping unusable movie entry {movie!r:.80}")
    return listings


class LaurelhurstScraper(BaseScraper):
    """Scraper for the Laurelhurst Theater's embedded schedule data."""

    name = "laurelhurst"
    theatre_name = "Laurelhurst Theater"
    base_url = BASE_URL

    async def collect(self, session: BrowserSession) -> None:
        if not await session.goto(BASE_URL, wait_until="networkidle"):
            raise ScrapeError("Laurelhurst home page did not load")
        if not await session.wait_for_function(READY_CONDITION):
            raise ScrapeError("Laurelhurst schedule data never appeared")

        data = await session.evaluate(READ_GLOBALS) or {}
        listings = parse_structured(data.get("movies"))
        logger.info(f"Laurelhurst: found {len(listings)} films")
        self.listings.extend(listings)
