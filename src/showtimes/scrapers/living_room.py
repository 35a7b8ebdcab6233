"""Living Room Theaters scraper.

The home page has a carousel of dates ("Sep 06"); clicking one swaps the
``#movieListing`` block to that day's films. Showtimes already in the past
are greyed out and skipped, and discounts ("29% off") sit next to each pill.
"""

import logging

from bs4 import BeautifulSoup, Tag

from showtimes.scrapers.base import BaseScraper, ScrapeError
from showtimes.scrapers.browser import BrowserSession
from showtimes.scrapers.models import RawListing, RawShowtime
from showtimes.scrapers.navigation import CarouselPicker
from showtimes.scrapers.selectors import first_attr, first_background_image, first_text

logger = logging.getLogger(__name__)

BASE_URL = "https://pdx.livingroomtheaters.com/"

DATE_ENTRY_SELECTOR = ".lrtCarousel-dates-for-homepage-EntryWrapper"
DATE_LABEL_SELECTOR = ".lrtCarousel-dates-for-homepage-EntryTopRow-monthDateText"
LISTING_SELECTOR = "#movieListing"
MOVIE_SELECTOR = "#movieListing .movie"
TITLE_SELECTORS = (".movieTitleH2 a", ".movieTitleH2")
POSTER_SELECTORS = (".poster img", ".poster")
PILL_SELECTOR = ".lrtShowtimePillLink, .lrt-pill-inPast"
PAST_CLASS = "lrt-pill-inPast"


def _pill_attribute(pill: Tag) -> str:
    wrapper = pill.find_parent(class_="lrtPillWrapper")
    if wrapper is None:
        return ""
    return first_text(wrapper, (".lrtAttribute",))


def _parse_movie(movie: Tag, date_label: str) -> RawListing | None:
    title = first_text(movie, TITLE_SELECTORS)
    if not title:
        return None

    showtimes = []
    for pill in movie.select(PILL_SELECTOR):
        time_text = pill.get_text(strip=True)
        if not time_text or PAST_CLASS in (pill.get("class") or []):
            continue
        showtimes.append(RawShowtime(time=time_text, attribute=_pill_attribute(pill)))
    if not showtimes:
        return None

    image_url = first_background_image(movie, POSTER_SELECTORS) or first_attr(
        movie, (".poster img",), "src"
    )
    return RawListing(title=title, showtimes=showtimes, raw_date=date_label, image_url=image_url)


def parse_listings(html: str, date_label: str) -> list[RawListing]:
    """Extract the films listed for the carousel date ``date_label``."""
    soup = BeautifulSoup(html, "html.parser")
    listings = []

    for movie in soup.select(MOVIE_SELECTOR):
        try:
            listing = _parse_movie(movie, date_label)
        except Exception as e:
            logger.warning(f"Living Room: error parsing film on {date_label}: {e}")
            continue
        if listing:
            listings.append(listing)

    return listings


class LivingRoomScraper(BaseScraper):
    """Scraper for Living Room Theaters, one carousel date at a time."""

    name = "living_room"
    theatre_name = "Living Room Theaters"
    base_url = BASE_URL

    async def collect(self, session: BrowserSession) -> None:
        if not await session.goto(BASE_URL, wait_until="networkidle"):
            raise ScrapeError("Living Room home page did not load")
        if not await session.wait_for_selector(DATE_ENTRY_SELECTOR):
            raise ScrapeError("Living Room date carousel did not render")

        carousel = CarouselPicker(
            session, self.pacer, DATE_ENTRY_SELECTOR, DATE_LABEL_SELECTOR, LISTING_SELECTOR
        )
        labels = [label for label in await carousel.labels() if "null" not in label]
        logger.info(f"Living Room: {len(labels)} dates in the carousel")

        for label in labels:
            if not await carousel.select(label):
                continue
            try:
                listings = parse_listings(await session.content(), label)
            except Exception as e:
                logger.warning(f"Living Room: error reading {label}: {e}")
                continue
            self.listings.extend(listings)
