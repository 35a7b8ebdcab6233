"""St. Johns Cinema scraper (Veezi "now playing" panels)."""

import logging

from bs4 import BeautifulSoup, Tag

from showtimes.scrapers.base import BaseScraper, ScrapeError
from showtimes.scrapers.browser import BrowserSession
from showtimes.scrapers.models import RawListing, RawShowtime
from showtimes.scrapers.selectors import first_attr, first_text

logger = logging.getLogger(__name__)

BASE_URL = "https://www.stjohnscinema.com/now-playing/"

PANEL_SELECTOR = ".veezi-film-panel"
TITLE_SELECTORS = (".veezi-film-info h3", ".veezi-film-title", "h3")
IMAGE_SELECTORS = (".veezi-film-media img", "img")
DATE_PANEL_SELECTOR = ".veezi-date-panel"
DATE_SELECTORS = (".veezi-date",)
TIME_SELECTOR = ".showtimes a"


def _parse_panel(panel: Tag) -> RawListing | None:
    title = first_text(panel, TITLE_SELECTORS)
    if not title:
        return None

    showtimes = []
    for date_panel in panel.select(DATE_PANEL_SELECTOR):
        date_text = first_text(date_panel, DATE_SELECTORS)
        if not date_text:
            continue
        for link in date_panel.select(TIME_SELECTOR):
            time_text = link.get_text(strip=True)
            if time_text:
                showtimes.append(RawShowtime(time=time_text, raw_date=date_text))
    if not showtimes:
        return None

    return RawListing(
        title=title,
        showtimes=showtimes,
        image_url=first_attr(panel, IMAGE_SELECTORS, "src"),
    )


def parse_listings(html: str) -> list[RawListing]:
    """Extract one listing per film panel, with showtimes for every date."""
    soup = BeautifulSoup(html, "html.parser")
    listings = []

    for panel in soup.select(PANEL_SELECTOR):
        try:
            listing = _parse_panel(panel)
        except Exception as e:
            logger.warning(f"St. Johns: error parsing film panel: {e}")
            continue
        if listing:
            listings.append(listing)

    return listings


class StJohnsScraper(BaseScraper):
    """Scraper for St. Johns Cinema. All dates are on the now-playing page."""

    name = "st_johns"
    theatre_name = "St. Johns Cinema"
    base_url = BASE_URL

    async def collect(self, session: BrowserSession) -> None:
        if not await session.goto(BASE_URL):
            raise ScrapeError("St. Johns now-playing page did not load")
        if not await session.wait_for_selector(PANEL_SELECTOR):
            raise ScrapeError("St. Johns film panels did not render")
        await self.pacer.pause("settle")

        listings = parse_listings(await session.content())
        logger.info(f"St. Johns: found {len(listings)} films")
        self.listings.extend(listings)
