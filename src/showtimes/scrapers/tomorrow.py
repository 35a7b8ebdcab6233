"""Tomorrow Theater scraper.

The coming-soon page lazy-loads its show list as you scroll. Each show
carries its date as a Unix timestamp in ``.show-date[data-date]``; when that
attribute is missing the printed date ("Thu 4Sep", "Today,  Aug 3") is used.
"""

import logging

from bs4 import BeautifulSoup, Tag

from showtimes.scrapers.base import BaseScraper, ScrapeError
from showtimes.scrapers.browser import BrowserSession
from showtimes.scrapers.models import RawListing, RawShowtime
from showtimes.scrapers.navigation import LazyScroller
from showtimes.scrapers.selectors import first_attr, first_text

logger = logging.getLogger(__name__)

BASE_URL = "https://tomorrowtheater.org/coming-soon/"

MAIN_SELECTOR = "#main"
LIST_SELECTOR = ".show-list"
SHOW_SELECTOR = ".show-list .show-details"
TITLE_SELECTORS = (".show-title .title", ".show-title")
IMAGE_SELECTORS = (".show-poster img",)
TAG_SELECTOR = ".pill"
TIME_SELECTOR = ".showtimes .showtime"
DATE_SELECTORS = (".show-date[data-date]", ".show-date")


def _show_date(show: Tag) -> str | None:
    timestamp = first_attr(show, DATE_SELECTORS, "data-date")
    if timestamp:
        return timestamp
    return first_text(show, DATE_SELECTORS) or None


def _parse_show(show: Tag) -> RawListing | None:
    title = first_text(show, TITLE_SELECTORS)
    if not title:
        return None

    times = [element.get_text(strip=True) for element in show.select(TIME_SELECTOR)]
    times = [time_text for time_text in times if time_text]
    if not times:
        return None

    raw_date = _show_date(show)
    if raw_date is None:
        logger.debug(f"Tomorrow: no date for {title!r}")
        return None

    tags = [pill.get_text(strip=True) for pill in show.select(TAG_SELECTOR)]
    return RawListing(
        title=title,
        showtimes=[RawShowtime(time=time_text) for time_text in times],
        raw_date=raw_date,
        image_url=first_attr(show, IMAGE_SELECTORS, "src")
        or first_attr(show, IMAGE_SELECTORS, "data-src"),
        attributes=[tag for tag in tags if tag],
    )


def parse_listings(html: str) -> list[RawListing]:
    """Extract every show from the fully loaded coming-soon list."""
    soup = BeautifulSoup(html, "html.parser")
    listings = []

    for show in soup.select(SHOW_SELECTOR):
        try:
            listing = _parse_show(show)
        except Exception as e:
            logger.warning(f"Tomorrow: error parsing show: {e}")
            continue
        if listing:
            listings.append(listing)

    return listings


class TomorrowScraper(BaseScraper):
    """Scraper for the Tomorrow Theater's lazily loaded coming-soon list."""

    name = "tomorrow"
    theatre_name = "Tomorrow Theater"
    base_url = BASE_URL

    async def collect(self, session: BrowserSession) -> None:
        if not await session.goto(BASE_URL):
            raise ScrapeError("Tomorrow Theater page did not load")
        if not await session.wait_for_selector(MAIN_SELECTOR):
            raise ScrapeError("Tomorrow Theater page has no main content")
        await self.pacer.pause("settle")

        if not await LazyScroller(session, self.pacer, LIST_SELECTOR).load_all():
            raise ScrapeError("Tomorrow Theater show list did not load")

        listings = parse_listings(await session.content())
        logger.info(f"Tomorrow: found {len(listings)} shows")
        self.listings.extend(listings)
