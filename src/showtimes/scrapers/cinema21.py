"""Cinema 21 scraper.

The home page lists every film with its sessions grouped under date headings
like "Today | August 01" or "Saturday | August 02". Later dates sit in a
collapsed "hidden sessions" block that repeats some of the visible sessions.
"""

import logging

from bs4 import BeautifulSoup, Tag

from showtimes.scrapers.base import BaseScraper, ScrapeError
from showtimes.scrapers.browser import BrowserSession
from showtimes.scrapers.models import RawListing, RawShowtime
from showtimes.scrapers.selectors import first_attr, first_text, select_first
from showtimes.utils.text import collapse_whitespace

logger = logging.getLogger(__name__)

BASE_URL = "https://www.cinema21.com"

MOVIE_SELECTORS = (".times-tickets-single-movie",)
TITLE_SELECTORS = (".times-tickets-single-movie__heading", "h2", "h3")
POSTER_SELECTORS = (".movie-poster", "img")
SESSION_SELECTOR = ".single-session"
HIDDEN_SESSION_SELECTOR = ".hidden-sessions__wrapper .single-session"
SESSION_DATE_SELECTORS = (".single-session__date",)
TIME_SELECTORS = (".time-slot__time",)
ATTRIBUTE_SELECTORS = (".time-slot__attribute",)


def _parse_sessions(sessions: list[Tag]) -> list[RawShowtime]:
    showtimes = []
    for session in sessions:
        date_text = first_text(session, SESSION_DATE_SELECTORS)
        if not date_text:
            continue
        for slot in session.select(".time-slot"):
            time_text = first_text(slot, TIME_SELECTORS)
            if not time_text:
                continue
            showtimes.append(
                RawShowtime(
                    time=time_text,
                    raw_date=date_text,
                    attribute=first_text(slot, ATTRIBUTE_SELECTORS),
                )
            )
    return showtimes


def _parse_movie(movie: Tag) -> RawListing | None:
    title = first_text(movie, TITLE_SELECTORS)
    if not title:
        logger.debug("Cinema 21: movie block without a title")
        return None

    # Hidden sessions are matched twice on purpose; the transformer drops repeats
    showtimes = _parse_sessions(movie.select(SESSION_SELECTOR))
    showtimes += _parse_sessions(movie.select(HIDDEN_SESSION_SELECTOR))
    if not showtimes:
        return None

    return RawListing(
        title=collapse_whitespace(title),
        showtimes=showtimes,
        image_url=first_attr(movie, POSTER_SELECTORS, "src"),
    )


def parse_listings(html: str) -> list[RawListing]:
    """Extract listings from the Cinema 21 home page."""
    soup = BeautifulSoup(html, "html.parser")
    listings = []

    for movie in select_first(soup, MOVIE_SELECTORS):
        # The print-only copy of the schedule duplicates every film
        if movie.find_parent(class_="hidden-print"):
            continue
        try:
            listing = _parse_movie(movie)
        except Exception as e:
            logger.warning(f"Cinema 21: error parsing movie block: {e}")
            continue
        if listing:
            listings.append(listing)

    return listings


class Cinema21Scraper(BaseScraper):
    """Scraper for Cinema 21. Everything is on one page."""

    name = "cinema21"
    theatre_name = "Cinema 21"
    base_url = BASE_URL

    async def collect(self, session: BrowserSession) -> None:
        if not await session.goto(BASE_URL, wait_until="networkidle"):
            raise ScrapeError("Cinema 21 home page did not load")
        if not await session.wait_for_selector(MOVIE_SELECTORS[0]):
            raise ScrapeError("Cinema 21 listings did not render")

        listings = parse_listings(await session.content())
        logger.info(f"Cinema 21: found {len(listings)} films")
        self.listings.extend(listings)
