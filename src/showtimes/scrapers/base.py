"""Base scraper interface for all theatre scrapers."""

import logging
from abc import ABC, abstractmethod
from datetime import date

from showtimes.scrapers.browser import BrowserSession, SessionFactory, open_session
from showtimes.scrapers.fingerprint import BASIC_PROFILE, FingerprintProfile
from showtimes.scrapers.models import CanonicalEvent, RawListing
from showtimes.scrapers.pacing import DEFAULT_PACING, Pacer, PacingPolicy
from showtimes.services import event_transformer
from showtimes.utils.dates import PACIFIC_TZ, parse_date_token, today_local

logger = logging.getLogger(__name__)


class ScrapeError(Exception):
    """The site could not be scraped at all (e.g. its first page never rendered)."""


class BaseScraper(ABC):
    """
    Abstract base class for all theatre scrapers.

    Subclasses describe their site with class attributes and implement
    ``collect``, which drives one browser session through the site and
    appends RawListings to ``self.listings``. ``scrape`` wraps that in a
    session and turns the listings into CanonicalEvents.

    Listings are accumulated on the instance so that whatever was collected
    before a timeout can still be salvaged.
    """

    name: str = ""
    theatre_name: str = ""
    base_url: str = ""
    fingerprint: FingerprintProfile = BASIC_PROFILE
    pacing: PacingPolicy = DEFAULT_PACING

    def __init__(
        self,
        *,
        session_factory: SessionFactory | None = None,
        pacer: Pacer | None = None,
        today: date | None = None,
    ):
        self._session_factory = session_factory or open_session
        self.pacer = pacer or Pacer(self.pacing)
        self._today = today
        self.listings: list[RawListing] = []
        self.partial_reason: str | None = None

    def today(self) -> date:
        """The run date; fixed when injected, otherwise today in Portland."""
        return self._today or today_local()

    def parse_date(self, token: object) -> date | None:
        """Resolve a site-native date token. Sites with one fixed format override this."""
        return parse_date_token(token, self.today(), PACIFIC_TZ)

    def mark_partial(self, reason: str) -> None:
        """Record that a multi-page walk stopped early."""
        self.partial_reason = reason
        logger.warning(f"{self.name}: stopping early, {reason}")

    @abstractmethod
    async def collect(self, session: BrowserSession) -> None:
        """
        Navigate the site and append RawListings to ``self.listings``.

        Raises:
            ScrapeError: if the site can't be scraped at all. Failures of a
                single page, date or month must be logged and skipped instead.
        """

    async def scrape(self) -> list[CanonicalEvent]:
        """Run a full scrape of the site and return its canonical events."""
        self.listings = []
        self.partial_reason = None

        async with self._session_factory(self.fingerprint) as session:
            await self.collect(session)

        events = self.salvage()
        logger.info(
            f"{self.name}: {len(self.listings)} listings -> {len(events)} events"
        )
        return events

    def salvage(self) -> list[CanonicalEvent]:
        """Transform whatever listings have been collected so far."""
        transformer = event_transformer.EventTransformer(
            self.theatre_name, self.parse_date, self.base_url
        )
        return transformer.transform_all(self.listings)
