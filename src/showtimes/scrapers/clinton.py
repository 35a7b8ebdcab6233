"""Clinton Street Theater scraper.

The month calendar (``/schedule/month/YYYY-MM/``) has no stable per-event
markup, so events are read from the page's text: a line like
"Sunday, September 28 @ 3:00 PM" starts an event, and the next plausible
line is its title. Price lines ("$12") and calendar chrome are skipped.
"""

import logging
import re
from datetime import date

from showtimes.config import settings
from showtimes.scrapers.base import BaseScraper, ScrapeError
from showtimes.scrapers.browser import BrowserSession
from showtimes.scrapers.models import RawListing, RawShowtime
from showtimes.utils.dates import WEEKDAYS, parse_at_datetime

logger = logging.getLogger(__name__)

BASE_URL = "https://cstpdx.com/schedule/month/"

_DATETIME_RE = re.compile(
    rf"({'|'.join(WEEKDAYS)}),\s+[A-Za-z]+\.?\s+\d{{1,2}}\s+@\s+\d{{1,2}}:\d{{2}}\s*(?:AM|PM)",
    re.IGNORECASE,
)
_STANDALONE_TIME_RE = re.compile(r"^\d{1,2}:\d{2}\s*(?:AM|PM)$", re.IGNORECASE)
_PRICE_RE = re.compile(r"^\$\d+$")

SKIP_LINE_MARKERS = (
    "Calendar of Events",
    "Views Navigation",
    "Select date",
    "events found",
    "Subscribe to calendar",
    "There are no events",
)


def _is_chrome(line: str) -> bool:
    """Calendar navigation and grid labels rather than event text."""
    return (
        any(marker in line for marker in SKIP_LINE_MARKERS)
        or re.fullmatch(r"[SMTWF]", line) is not None
        or line.isdigit()
    )


def _could_be_title(line: str) -> bool:
    return (
        3 < len(line) < 100
        and "events," not in line
        and "@" not in line
        and not line[0].isdigit()
        and not _STANDALONE_TIME_RE.match(line)
        and not _PRICE_RE.match(line)
        and "Calendar" not in line
    )


def is_valid_title(title: str) -> bool:
    """Reject headings that get picked up as titles (series banners, nav text)."""
    lowered = title.lower()
    return not (
        "event series" in lowered
        or lowered == "events"
        or "navigation" in lowered
        or "calendar" in lowered
        or len(title) < 2
    )


def parse_schedule_text(text: str) -> list[RawListing]:
    """Extract one listing per dated event from the calendar page text."""
    lines = [line.strip() for line in text.splitlines()]
    listings: list[RawListing] = []
    current: dict | None = None

    def finish() -> None:
        if current and current["title"] and is_valid_title(current["title"]):
            listings.append(
                RawListing(
                    title=current["title"],
                    showtimes=[RawShowtime(time=current["time"], raw_date=current["datetime"])],
                )
            )

    for line in lines:
        if not line or _is_chrome(line):
            continue

        match = _DATETIME_RE.search(line)
        if match:
            finish()
            parsed = parse_at_datetime(match.group(0))
            current = {
                "datetime": match.group(0),
                "time": parsed[1] if parsed else "",
                "title": "",
            }
            continue

        if current and not current["title"] and _could_be_title(line):
            current["title"] = line

    finish()
    return listings


def month_urls(today: date, months: int) -> list[str]:
    """The default (current month) page followed by the explicit later months."""
    urls = [BASE_URL]
    year, month = today.year, today.month
    for _ in range(1, months):
        month += 1
        if month > 12:
            year, month = year + 1, 1
        urls.append(f"{BASE_URL}{year}-{month:02d}/")
    return urls


class ClintonScraper(BaseScraper):
    """Scraper for the Clinton Street Theater month calendar."""

    name = "clinton"
    theatre_name = "Clinton Street Theater"
    base_url = BASE_URL

    async def collect(self, session: BrowserSession) -> None:
        urls = month_urls(self.today(), settings.clinton_months)

        for index, url in enumerate(urls):
            if not await session.goto(url, wait_until="networkidle"):
                if index == 0:
                    raise ScrapeError("Clinton Street calendar did not load")
                self.mark_partial(f"month page {url} did not load")
                break

            await self.pacer.pause("settle")
            try:
                listings = parse_schedule_text(await session.body_text())
            except Exception as e:
                logger.warning(f"Clinton: error reading {url}: {e}")
                continue

            logger.info(f"Clinton: {len(listings)} events on {url}")
            self.listings.extend(listings)
            if index < len(urls) - 1:
                await self.pacer.pause("between_pages")
