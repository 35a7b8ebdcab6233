"""Hollywood Theater scraper.

The schedule is a FullCalendar month grid. The scraper switches to the month
view, reads the visible month, then pages forward with the "next" button,
checking that the month label really changed before reading again.
"""

import logging
import re

from bs4 import BeautifulSoup, Tag

from showtimes.config import settings
from showtimes.scrapers.base import BaseScraper, ScrapeError
from showtimes.scrapers.browser import BrowserSession
from showtimes.scrapers.models import RawListing, RawShowtime
from showtimes.scrapers.navigation import CalendarPager
from showtimes.scrapers.selectors import first_background_image, first_match, first_text, select_first
from showtimes.utils.text import collapse_whitespace

logger = logging.getLogger(__name__)

BASE_URL = "https://hollywoodtheatre.org/"

EVENT_SELECTORS = (
    ".fc-daygrid-event",
    ".fc-event",
    ".fc-gecko-event-item",
    '[class*="event"]',
    "[data-date] .fc-event",
)
ITEM_SELECTORS = (".fc-gecko-event-item",)
TITLE_SELECTORS = (".fc-gecko-event-item__title", ".fc-event-title", '[class*="title"]')
DETAILS_SELECTORS = (".fc-gecko-event-item__details", '[class*="details"]')
IMAGE_SELECTORS = (".fc-gecko-event-item__image", '[style*="background-image"]')

MONTH_LABEL_SELECTOR = ".fc-toolbar-title"
NEXT_MONTH_SELECTOR = ".fc-next-button"
MONTH_VIEW_SELECTOR = ".fc-dayGridMonth-button"

_TIME_RE = re.compile(r"\d{1,2}:\d{2}(am|pm)", re.IGNORECASE)


def _event_date(event: Tag) -> str | None:
    """ISO date of the grid cell the event sits in."""
    if event.has_attr("data-date"):
        return event["data-date"]
    cell = event.find_parent(attrs={"data-date": True})
    return cell["data-date"] if cell else None


def _parse_event(event: Tag) -> RawListing | None:
    event_date = _event_date(event)
    if not event_date:
        logger.debug("Hollywood: event outside a dated cell")
        return None

    item = first_match(event, ITEM_SELECTORS) or event
    title = first_text(item, TITLE_SELECTORS) or collapse_whitespace(item.get_text(" "))
    if not title:
        return None

    details = first_match(item, DETAILS_SELECTORS) or item
    times = [
        span.get_text(strip=True)
        for span in details.select("span")
        if _TIME_RE.search(span.get_text(strip=True))
    ]
    if not times:
        return None

    return RawListing(
        title=title,
        showtimes=[RawShowtime(time=time_text) for time_text in times],
        raw_date=event_date,
        image_url=first_background_image(item, IMAGE_SELECTORS),
    )


def parse_listings(html: str) -> list[RawListing]:
    """Extract the events shown in the current calendar view."""
    soup = BeautifulSoup(html, "html.parser")
    listings = []

    events = select_first(soup, EVENT_SELECTORS)
    if not events:
        logger.warning("Hollywood: no calendar events found with any selector")

    for event in events:
        try:
            listing = _parse_event(event)
        except Exception as e:
            logger.warning(f"Hollywood: error parsing calendar event: {e}")
            continue
        if listing:
            listings.append(listing)

    return listings


class HollywoodScraper(BaseScraper):
    """Scraper for the Hollywood Theater calendar, several months ahead."""

    name = "hollywood"
    theatre_name = "Hollywood Theater"
    base_url = BASE_URL

    async def _open_month_view(self, session: BrowserSession) -> None:
        if await session.click_text("button", "Calendar", "span"):
            logger.debug("Hollywood: switched to calendar view")
            await self.pacer.pause("settle")
        if await session.click(MONTH_VIEW_SELECTOR):
            await self.pacer.pause("settle")

    async def collect(self, session: BrowserSession) -> None:
        if not await session.goto(BASE_URL):
            raise ScrapeError("Hollywood Theater home page did not load")
        await self.pacer.pause("settle")

        await self._open_month_view(session)
        if not await session.wait_for_selector(MONTH_LABEL_SELECTOR):
            raise ScrapeError("Hollywood calendar did not render")

        pager = CalendarPager(session, self.pacer, NEXT_MONTH_SELECTOR, MONTH_LABEL_SELECTOR)
        months = settings.calendar_months

        for month_index in range(months):
            label = await pager.current_label()
            logger.info(f"Hollywood: reading month {month_index + 1}/{months}: {label}")
            await self.pacer.pause("reading")

            try:
                self.listings.extend(parse_listings(await session.content()))
            except Exception as e:
                logger.warning(f"Hollywood: error reading {label}: {e}")

            if month_index < months - 1 and not await pager.advance():
                self.mark_partial(f"calendar would not move past {label}")
                break
