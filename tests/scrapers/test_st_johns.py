"""Unit tests for the St. Johns Cinema scraper."""

from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from showtimes.scrapers.base import ScrapeError
from showtimes.scrapers.st_johns import StJohnsScraper, parse_listings

FIXTURE_DIR = Path(__file__).parent / "fixtures" / "st_johns"
TODAY = date(2025, 9, 26)


@pytest.fixture
def fixture_html() -> str:
    return (FIXTURE_DIR / "now_playing.html").read_text()


# ---------------------------------------------------------------------------
# parse_listings - pure parsing, no browser
# ---------------------------------------------------------------------------


class TestStJohnsParseListings:
    def test_skips_panels_without_dated_showtimes(self, fixture_html: str) -> None:
        titles = [listing.title for listing in parse_listings(fixture_html)]
        assert titles == ["One Battle After Another", "The Rocky Horror Picture Show (open caption)"]

    def test_showtimes_keep_their_date_heading(self, fixture_html: str) -> None:
        listing = parse_listings(fixture_html)[0]
        assert [(s.raw_date, s.time) for s in listing.showtimes] == [
            ("Today, Sep 26", "4:00 PM"),
            ("Today, Sep 26", "7:30 PM"),
            ("Saturday, Sep 27", "1:00 PM"),
        ]

    def test_poster(self, fixture_html: str) -> None:
        listing = parse_listings(fixture_html)[0]
        assert listing.image_url == "https://images.veezi.com/posters/one-battle.jpg"


# ---------------------------------------------------------------------------
# scrape - mocked browser session
# ---------------------------------------------------------------------------


class TestStJohnsScrape:
    async def test_events_per_day(
        self, fixture_html, make_session, session_factory, quiet_pacer
    ) -> None:
        session = make_session(fixture_html)
        scraper = StJohnsScraper(
            session_factory=session_factory(session), pacer=quiet_pacer, today=TODAY
        )

        events = await scraper.scrape()

        assert [(e.title, e.date, e.times) for e in events] == [
            ("One Battle After Another", date(2025, 9, 26), ["4:00 PM", "7:30 PM"]),
            ("One Battle After Another", date(2025, 9, 27), ["1:00 PM"]),
            ("The Rocky Horror Picture Show", date(2025, 9, 27), ["11:59 PM"]),
        ]
        assert events[2].accessibility == ["Open Captions"]
        assert all(e.theatre == "St. Johns Cinema" for e in events)

    async def test_panels_never_render(self, make_session, session_factory, quiet_pacer) -> None:
        session = make_session(wait_for_selector=AsyncMock(return_value=False))
        scraper = StJohnsScraper(session_factory=session_factory(session), pacer=quiet_pacer)

        with pytest.raises(ScrapeError):
            await scraper.scrape()
