"""Cinemagic scraper (Fandango theater page).

Fandango shows one day at a time. Today is loaded by default; later days are
picked through the date-picker overlay, or the row of date tabs when the
overlay isn't available. Showtimes are printed like "7:00p".
"""

import logging
from datetime import date, timedelta

from bs4 import BeautifulSoup, Tag

from showtimes.config import settings
from showtimes.scrapers.base import BaseScraper, ScrapeError
from showtimes.scrapers.browser import BrowserSession
from showtimes.scrapers.models import RawListing, RawShowtime
from showtimes.scrapers.navigation import CalendarModalPicker
from showtimes.scrapers.selectors import (
    first_attr,
    first_background_image,
    first_text,
    select_first,
)
from showtimes.utils.dates import is_showtime

logger = logging.getLogger(__name__)

BASE_URL = "https://www.fandango.com/cinemagic-theatre-aaijp/theater-page?format=all"

READY_SELECTOR = ".thtr-mv-list"
PANEL_SELECTORS = (".thtr-mv-list .thtr-mv-list__panel", ".thtr-mv-list__panel")
TITLE_SELECTORS = (".thtr-mv-list__detail-title a", ".thtr-mv-list__detail-title")
POSTER_STYLE_SELECTORS = (".thtr-mv-list__detail-poster",)
POSTER_IMG_SELECTORS = (".thtr-mv-list__detail-poster img", "img")
TIME_SELECTORS = (".showtimes-btn-list__item a.showtime-btn", "a.showtime-btn")
AMENITY_SELECTORS = (".thtr-mv-list__showtimes-title",)

DATE_PICKER_OPENER = ".date-picker__calendar-btn"
DATE_PICKER_DAY = ".date-picker__calendar-day"
DATE_TAB_TEMPLATE = 'button[data-show-time-date="{iso}"]'


def _parse_panel(panel: Tag, day: date) -> RawListing | None:
    title = first_text(panel, TITLE_SELECTORS)
    if not title:
        return None

    times = []
    for element in select_first(panel, TIME_SELECTORS):
        time_text = element.get_text(strip=True)
        if is_showtime(time_text, require_meridiem=True):
            times.append(time_text)
    if not times:
        return None

    amenity = first_text(panel, AMENITY_SELECTORS)
    image_url = first_background_image(panel, POSTER_STYLE_SELECTORS) or first_attr(
        panel, POSTER_IMG_SELECTORS, "src"
    )

    return RawListing(
        title=title,
        showtimes=[RawShowtime(time=time_text) for time_text in times],
        raw_date=day,
        image_url=image_url,
        attributes=[amenity] if amenity else [],
    )


def parse_listings(html: str, day: date) -> list[RawListing]:
    """Extract the films showing on the currently selected ``day``."""
    soup = BeautifulSoup(html, "html.parser")
    listings = []

    for panel in select_first(soup, PANEL_SELECTORS):
        try:
            listing = _parse_panel(panel, day)
        except Exception as e:
            logger.warning(f"Cinemagic: error parsing panel on {day}: {e}")
            continue
        if listing:
            listings.append(listing)

    return listings


class CinemagicScraper(BaseScraper):
    """Scraper for Cinemagic via its Fandango theater page."""

    name = "cinemagic"
    theatre_name = "Cinemagic"
    base_url = BASE_URL

    async def _scrape_current(self, session: BrowserSession, day: date) -> None:
        listings = parse_listings(await session.content(), day)
        logger.info(f"Cinemagic: {len(listings)} films on {day}")
        self.listings.extend(listings)

    async def collect(self, session: BrowserSession) -> None:
        if not await session.goto(BASE_URL, wait_until="networkidle"):
            raise ScrapeError("Cinemagic theater page did not load")
        if not await session.wait_for_selector(READY_SELECTOR):
            raise ScrapeError("Cinemagic movie list did not render")
        await self.pacer.pause("settle")

        today = self.today()
        await self._scrape_current(session, today)

        picker = CalendarModalPicker(
            session,
            self.pacer,
            opener_selector=DATE_PICKER_OPENER,
            day_selector=DATE_PICKER_DAY,
            tab_selector_template=DATE_TAB_TEMPLATE,
            ready_selector=READY_SELECTOR,
        )
        for offset in range(1, settings.cinemagic_days):
            day = today + timedelta(days=offset)
            if not await picker.select_day(day):
                # Later days are only reachable through the same control
                self.mark_partial(f"could not select {day}")
                break
            try:
                await self._scrape_current(session, day)
            except Exception as e:
                logger.warning(f"Cinemagic: error reading {day}: {e}")
