"""Academy Theater scraper.

The Academy's site sits behind Squarespace/SiteGround bot protection, so it
is walked one date at a time through ``?date=YYYY-MM-DD`` URLs with a
hardened browser fingerprint, long randomised pauses and a bit of simulated
reading on every page. Dates that come back as a challenge page are skipped.
"""

import logging
from datetime import date

from bs4 import BeautifulSoup, Tag

from showtimes.config import settings
from showtimes.scrapers.base import BaseScraper, ScrapeError
from showtimes.scrapers.browser import BrowserSession
from showtimes.scrapers.fingerprint import HUMAN_PROFILE
from showtimes.scrapers.models import RawListing, RawShowtime
from showtimes.scrapers.navigation import DateQueryWalker, rolling_window
from showtimes.scrapers.pacing import CAUTIOUS_PACING
from showtimes.scrapers.selectors import first_attr, first_text
from showtimes.utils.dates import is_showtime

logger = logging.getLogger(__name__)

BASE_URL = "https://academytheaterpdx.com/now-playing"

CONTENT_SELECTOR = ".col-md-12.col-lg-6"
CONTAINER_SELECTOR = ".at-np-container"
TITLE_SELECTORS = ("h2 a", "h2")
POSTER_SELECTORS = ("img",)
TIME_SELECTORS = (".at-np-details-times ul li span:first-child", ".at-np-details-times li")
SPECIAL_SELECTOR = ".signs .fas.fa-star"

SPECIAL_SCREENING = "Special Screening"


def _parse_container(container: Tag, day: date) -> RawListing | None:
    title = first_text(container, TITLE_SELECTORS)
    if not title:
        return None

    times: list[str] = []
    for selector in TIME_SELECTORS:
        times = [
            element.get_text(strip=True)
            for element in container.select(selector)
            if is_showtime(element.get_text(strip=True), require_meridiem=True)
        ]
        if times:
            break
    if not times:
        return None

    attributes = [SPECIAL_SCREENING] if container.select_one(SPECIAL_SELECTOR) else []
    image_url = first_attr(container, POSTER_SELECTORS, "src") or first_attr(
        container, POSTER_SELECTORS, "data-src"
    )

    return RawListing(
        title=title,
        showtimes=[RawShowtime(time=time_text) for time_text in times],
        raw_date=day,
        image_url=image_url,
        attributes=attributes,
    )


def parse_listings(html: str, day: date) -> list[RawListing]:
    """Extract the listings shown on the page for ``day``."""
    soup = BeautifulSoup(html, "html.parser")
    listings = []

    for column in soup.select(CONTENT_SELECTOR):
        container = column.select_one(CONTAINER_SELECTOR)
        if container is None:
            continue
        try:
            listing = _parse_container(container, day)
        except Exception as e:
            logger.warning(f"Academy: error parsing listing on {day}: {e}")
            continue
        if listing:
            listings.append(listing)

    return listings


class AcademyScraper(BaseScraper):
    """Scraper for the Academy Theater, one ``?date=`` page per day."""

    name = "academy"
    theatre_name = "Academy Theater"
    base_url = BASE_URL
    fingerprint = HUMAN_PROFILE
    pacing = CAUTIOUS_PACING

    async def _scrape_day(self, walker: DateQueryWalker, session: BrowserSession, day: date) -> bool:
        if not await walker.load(day):
            return False
        await walker.simulate_reading()
        listings = parse_listings(await session.content(), day)
        logger.info(f"Academy: {len(listings)} films on {day}")
        self.listings.extend(listings)
        return True

    async def collect(self, session: BrowserSession) -> None:
        walker = DateQueryWalker(session, self.pacer, BASE_URL, CONTENT_SELECTOR)
        days = rolling_window(self.today(), settings.days_ahead)

        loaded = 0
        for index, day in enumerate(days):
            try:
                if await self._scrape_day(walker, session, day):
                    loaded += 1
            except Exception as e:
                logger.warning(f"Academy: error loading {day}: {e}")

            if index < len(days) - 1:
                await self.pacer.pause("between_pages")

        if not loaded:
            raise ScrapeError("Academy: no date page could be loaded")
        if loaded < len(days):
            self.mark_partial(f"skipped {len(days) - loaded} of {len(days)} dates")
