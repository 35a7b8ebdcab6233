"""Navigation drivers.

Each driver moves a ``BrowserSession`` to the next unit of listings (month,
date, carousel entry) and reports whether the page is ready to read. They
never raise for ordinary navigation trouble: a failed unit logs and returns
False so the caller can skip it and carry on with the next one.
"""

import logging
from datetime import date, timedelta

from showtimes.config import settings
from showtimes.scrapers.browser import BrowserSession
from showtimes.scrapers.pacing import Pacer

logger = logging.getLogger(__name__)

CHALLENGE_URL_MARKERS = ("sgcaptcha", "cloudflare")
CHALLENGE_TITLE_MARKERS = ("Robot Challenge",)
# Phrases from the interstitials themselves; a bare "challenge" also appears in film synopses
CHALLENGE_BODY_MARKERS = (
    "Robot Challenge",
    "Checking your browser",
    "Verify you are human",
    "complete the security check",
)

# Lowercased body text that means an interstitial is still in front of the page
LOADING_BODY_MARKERS = ("establishing", "secure connection", "loading")
MIN_LOADED_BODY_LENGTH = 500


def detect_challenge(url: str, title: str, body_text: str) -> bool:
    """True when the page is a bot-challenge interstitial instead of listings."""
    url = url or ""
    title = title or ""
    body_text = body_text or ""
    return (
        any(marker in url for marker in CHALLENGE_URL_MARKERS)
        or any(marker in title for marker in CHALLENGE_TITLE_MARKERS)
        or any(marker in body_text for marker in CHALLENGE_BODY_MARKERS)
    )


def looks_unfinished(body_text: str) -> bool:
    """True when the body reads like a loading screen rather than a listing page."""
    lowered = (body_text or "").lower()
    return len(body_text or "") < MIN_LOADED_BODY_LENGTH or any(
        marker in lowered for marker in LOADING_BODY_MARKERS
    )


def rolling_window(start: date, days: int | None = None) -> list[date]:
    """``days`` consecutive dates beginning with ``start``."""
    days = settings.days_ahead if days is None else days
    return [start + timedelta(days=offset) for offset in range(days)]


class CalendarPager:
    """
    Pages a month calendar forward with its "next" control.

    A click only counts once the visible month label differs from the one
    shown before the click; the control is re-clicked up to ``max_attempts``
    times before the walk is abandoned.
    """

    def __init__(
        self,
        session: BrowserSession,
        pacer: Pacer,
        next_selector: str,
        label_selector: str,
        max_attempts: int | None = None,
    ):
        self.session = session
        self.pacer = pacer
        self.next_selector = next_selector
        self.label_selector = label_selector
        self.max_attempts = max_attempts or settings.scrape_max_retries

    async def current_label(self) -> str | None:
        return await self.session.text_of(self.label_selector)

    async def advance(self) -> bool:
        """Move to the next month. Returns False if the label never changed."""
        previous = await self.current_label()

        if not await self.session.click(self.next_selector):
            logger.warning(f"Next control {self.next_selector!r} not found")
            return False
        await self.pacer.pause("settle")

        for attempt in range(1, self.max_attempts + 1):
            label = await self.current_label()
            if label and label != previous:
                logger.info(f"Calendar moved from {previous!r} to {label!r}")
                return True

            logger.warning(
                f"Calendar label unchanged (attempt {attempt}/{self.max_attempts}): "
                f"{label!r}"
            )
            if attempt < self.max_attempts:
                await self.session.click(self.next_selector)
                await self.pacer.pause("settle")

        logger.warning(f"Calendar stuck on {previous!r} after {self.max_attempts} attempts")
        return False


class DateQueryWalker:
    """Loads ``<base_url>?date=<ISO date>`` pages one date at a time."""

    def __init__(
        self,
        session: BrowserSession,
        pacer: Pacer,
        base_url: str,
        content_selector: str,
    ):
        self.session = session
        self.pacer = pacer
        self.base_url = base_url
        self.content_selector = content_selector

    def url_for(self, day: date) -> str:
        return f"{self.base_url}?date={day.isoformat()}"

    async def load(self, day: date) -> bool:
        """
        Navigate to the page for ``day`` and check it holds listings.

        Returns False (skip this date) when the page fails to load, turns out
        to be a bot challenge, or still has no content after one extra wait.
        """
        url = self.url_for(day)
        logger.info(f"Loading {url}")
        if not await self.session.goto(url):
            return False
        await self.pacer.pause("settle")

        if looks_unfinished(await self.session.body_text()):
            logger.info(f"Page for {day} still loading, waiting longer")
            await self.pacer.pause("stall")

        title = await self.session.title()
        body_text = await self.session.body_text()
        if detect_challenge(self.session.url, title, body_text):
            logger.warning(f"Bot challenge on {day}, skipping this date")
            return False

        if await self.session.count(self.content_selector) > 0:
            return True

        logger.warning(f"No listings yet for {day}, waiting once more")
        await self.pacer.pause("content_retry")
        if await self.session.count(self.content_selector) > 0:
            return True

        logger.warning(f"Still no listings for {day}, skipping this date")
        return False

    async def simulate_reading(self) -> None:
        """Scroll a little and linger, occasionally scrolling back up.

        Cautious policies also move the pointer onto the listings first.
        """
        if self.pacer.policy.simulate_pointer:
            await self.session.move_pointer(self.content_selector, self.pacer)
        await self.session.scroll_by(self.pacer.scroll_distance(100, 300))
        await self.pacer.pause("reading")
        if self.pacer.chance(0.3):
            await self.session.scroll_by(-self.pacer.scroll_distance(50, 150))
            await self.pacer.pause("action")


class CalendarModalPicker:
    """
    Selects a day through a date-picker overlay.

    The modal path opens the picker and clicks the control labelled with the
    day of the month. If that fails, the day's tab
    (``tab_selector_template.format(iso=...)``) is clicked directly.
    """

    def __init__(
        self,
        session: BrowserSession,
        pacer: Pacer,
        opener_selector: str,
        day_selector: str,
        tab_selector_template: str,
        ready_selector: str,
    ):
        self.session = session
        self.pacer = pacer
        self.opener_selector = opener_selector
        self.day_selector = day_selector
        self.tab_selector_template = tab_selector_template
        self.ready_selector = ready_selector

    async def _via_modal(self, day: date) -> bool:
        if not await self.session.human_click(self.opener_selector, self.pacer):
            return False
        await self.pacer.pause("action")
        if not await self.session.wait_for_selector(self.day_selector):
            return False
        if not await self.session.click_text(self.day_selector, str(day.day)):
            logger.debug(f"No day control labelled {day.day} in the picker")
            return False
        return True

    async def _via_tab(self, day: date) -> bool:
        selector = self.tab_selector_template.format(iso=day.isoformat())
        return await self.session.click(selector)

    async def select_day(self, day: date) -> bool:
        """Select ``day`` and wait for its listings. False if neither path worked."""
        selected = await self._via_modal(day)
        if not selected:
            logger.info(f"Date picker failed for {day}, trying the date tab")
            selected = await self._via_tab(day)
        if not selected:
            logger.warning(f"Could not select {day}")
            return False

        await self.pacer.pause("settle")
        if not await self.session.wait_for_selector(self.ready_selector):
            logger.warning(f"Listings panel did not refresh for {day}")
            return False
        return True


class CarouselPicker:
    """Clicks through a strip of date entries, one label at a time."""

    def __init__(
        self,
        session: BrowserSession,
        pacer: Pacer,
        entry_selector: str,
        label_selector: str,
        ready_selector: str,
        max_entries: int | None = None,
    ):
        self.session = session
        self.pacer = pacer
        self.entry_selector = entry_selector
        self.label_selector = label_selector
        self.ready_selector = ready_selector
        self.max_entries = max_entries or settings.max_carousel_dates

    async def labels(self) -> list[str]:
        """Unique entry labels in carousel order, capped at ``max_entries``."""
        seen: list[str] = []
        for label in await self.session.texts_of(f"{self.entry_selector} {self.label_selector}"):
            if label and label not in seen:
                seen.append(label)
            if len(seen) >= self.max_entries:
                break
        return seen

    async def select(self, label: str) -> bool:
        if not await self.session.click_text(self.entry_selector, label, self.label_selector):
            logger.warning(f"Carousel entry {label!r} not found")
            return False
        await self.pacer.pause("settle")
        if not await self.session.wait_for_selector(self.ready_selector):
            logger.warning(f"Listings did not load for {label!r}")
            return False
        return True


class LazyScroller:
    """Scrolls to the bottom to trigger lazy loading, then lets the page settle."""

    def __init__(self, session: BrowserSession, pacer: Pacer, ready_selector: str, passes: int = 2):
        self.session = session
        self.pacer = pacer
        self.ready_selector = ready_selector
        self.passes = passes

    async def load_all(self) -> bool:
        for _ in range(self.passes):
            await self.session.scroll_to_bottom()
            await self.pacer.pause("settle")
        return await self.session.wait_for_selector(self.ready_selector)
