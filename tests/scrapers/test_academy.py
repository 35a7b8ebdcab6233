"""Unit tests for the Academy Theater scraper."""

import random
from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from showtimes.scrapers.academy import AcademyScraper, parse_listings
from showtimes.scrapers.base import ScrapeError
from showtimes.scrapers.pacing import CAUTIOUS_PACING, Pacer

FIXTURE_DIR = Path(__file__).parent / "fixtures" / "academy"
DAY = date(2025, 9, 3)


@pytest.fixture
def fixture_html() -> str:
    return (FIXTURE_DIR / "now_playing.html").read_text()


# ---------------------------------------------------------------------------
# parse_listings - pure parsing, no browser
# ---------------------------------------------------------------------------


class TestAcademyParseListings:
    def test_extracts_films_with_times(self, fixture_html: str) -> None:
        listings = parse_listings(fixture_html, DAY)
        assert [listing.title for listing in listings] == ["Superman", "Jaws in 35mm"]

    def test_times_use_first_span_only(self, fixture_html: str) -> None:
        superman = parse_listings(fixture_html, DAY)[0]
        assert superman.times == ["12:30 pm", "3:45 pm", "7:00 pm"]

    def test_listing_carries_page_date(self, fixture_html: str) -> None:
        assert all(listing.raw_date == DAY for listing in parse_listings(fixture_html, DAY))

    def test_star_marks_special_screening(self, fixture_html: str) -> None:
        superman, jaws = parse_listings(fixture_html, DAY)
        assert superman.attributes == []
        assert jaws.attributes == ["Special Screening"]

    def test_lazy_loaded_poster(self, fixture_html: str) -> None:
        jaws = parse_listings(fixture_html, DAY)[1]
        assert jaws.image_url == "/wp-content/uploads/jaws.jpg"

    def test_empty_page(self) -> None:
        assert parse_listings("<html><body></body></html>", DAY) == []


# ---------------------------------------------------------------------------
# scrape - mocked browser session
# ---------------------------------------------------------------------------


class TestAcademyScrape:
    async def test_walks_every_date(
        self, fixture_html, make_session, session_factory, quiet_pacer, monkeypatch
    ) -> None:
        monkeypatch.setattr("showtimes.scrapers.academy.settings.days_ahead", 2)
        session = make_session(fixture_html)
        scraper = AcademyScraper(
            session_factory=session_factory(session), pacer=quiet_pacer, today=DAY
        )

        events = await scraper.scrape()

        urls = [c.args[0] for c in session.goto.await_args_list]
        assert urls == [
            "https://academytheaterpdx.com/now-playing?date=2025-09-03",
            "https://academytheaterpdx.com/now-playing?date=2025-09-04",
        ]
        jaws = [e for e in events if e.title == "Jaws"]
        assert [e.date for e in jaws] == [date(2025, 9, 3), date(2025, 9, 4)]
        assert jaws[0].format == "35mm"
        assert jaws[0].discount == ["Special Screening"]
        assert jaws[0].image_url == "https://academytheaterpdx.com/wp-content/uploads/jaws.jpg"
        assert scraper.partial_reason is None

    async def test_challenge_date_is_skipped(
        self, fixture_html, make_session, session_factory, quiet_pacer, monkeypatch
    ) -> None:
        monkeypatch.setattr("showtimes.scrapers.academy.settings.days_ahead", 2)
        session = make_session(
            fixture_html,
            title=AsyncMock(side_effect=["Robot Challenge Screen", "Now Playing"]),
        )
        scraper = AcademyScraper(
            session_factory=session_factory(session), pacer=quiet_pacer, today=DAY
        )

        events = await scraper.scrape()

        assert {e.date for e in events} == {date(2025, 9, 4)}
        assert scraper.partial_reason == "skipped 1 of 2 dates"

    async def test_raises_when_no_date_loads(
        self, make_session, session_factory, quiet_pacer, monkeypatch
    ) -> None:
        monkeypatch.setattr("showtimes.scrapers.academy.settings.days_ahead", 2)
        session = make_session(goto=AsyncMock(return_value=False))
        scraper = AcademyScraper(
            session_factory=session_factory(session), pacer=quiet_pacer, today=DAY
        )

        with pytest.raises(ScrapeError):
            await scraper.scrape()

    async def test_cautious_pacing_points_at_listings(
        self, fixture_html, make_session, session_factory, monkeypatch
    ) -> None:
        monkeypatch.setattr("showtimes.scrapers.academy.settings.days_ahead", 1)
        session = make_session(fixture_html)
        pacer = Pacer(CAUTIOUS_PACING, rng=random.Random(0), sleep=AsyncMock())
        scraper = AcademyScraper(session_factory=session_factory(session), pacer=pacer, today=DAY)

        await scraper.scrape()

        session.move_pointer.assert_awaited_once_with(".col-md-12.col-lg-6", pacer)
