"""Headless browser sessions for scrapers.

Scrapers and navigation drivers only talk to ``BrowserSession``: open a page,
navigate, wait for a selector or condition, read the DOM, click, scroll.
Playwright timeouts become boolean results here so callers can treat a
missing element as an ordinary navigation failure.
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright_stealth import Stealth

from showtimes.config import settings
from showtimes.scrapers.fingerprint import BASIC_PROFILE, FingerprintProfile
from showtimes.scrapers.pacing import Pacer

logger = logging.getLogger(__name__)

SessionFactory = Callable[[FingerprintProfile], AbstractAsyncContextManager["BrowserSession"]]


class BrowserSession:
    """One page in one browser, owned by a single site's scrape."""

    def __init__(self, page: Page, timeout_ms: int | None = None) -> None:
        self._page = page
        self.timeout_ms = timeout_ms or settings.navigation_timeout_ms
        self._pointer: tuple[float, float] = (100.0, 100.0)

    @property
    def url(self) -> str:
        return self._page.url

    async def goto(
        self,
        url: str,
        wait_until: str = "domcontentloaded",
        timeout_ms: int | None = None,
    ) -> bool:
        """Navigate to a URL. Returns False if the page didn't load in time."""
        try:
            await self._page.goto(
                url,
                wait_until=wait_until,
                timeout=timeout_ms or settings.page_load_timeout_ms,
            )
            return True
        except PlaywrightTimeoutError:
            logger.warning(f"Timed out loading {url}")
        except PlaywrightError as e:
            logger.warning(f"Failed to load {url}: {e}")
        return False

    async def wait_for_selector(self, selector: str, timeout_ms: int | None = None) -> bool:
        """Wait for an element to be attached. Returns False on timeout."""
        try:
            await self._page.wait_for_selector(
                selector, state="attached", timeout=timeout_ms or self.timeout_ms
            )
            return True
        except PlaywrightTimeoutError:
            logger.debug(f"Selector {selector!r} did not appear")
            return False

    async def wait_for_function(self, expression: str, timeout_ms: int | None = None) -> bool:
        """Wait for a JS expression to become truthy. Returns False on timeout."""
        try:
            await self._page.wait_for_function(expression, timeout=timeout_ms or self.timeout_ms)
            return True
        except PlaywrightTimeoutError:
            logger.debug(f"Condition {expression!r} was not met")
            return False

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        if arg is None:
            return await self._page.evaluate(expression)
        return await self._page.evaluate(expression, arg)

    async def content(self) -> str:
        return await self._page.content()

    async def title(self) -> str:
        return await self._page.title()

    async def body_text(self) -> str:
        return await self._page.evaluate("() => document.body ? document.body.innerText : ''")

    async def count(self, selector: str) -> int:
        return len(await self._page.query_selector_all(selector))

    async def text_of(self, selector: str) -> str | None:
        element = await self._page.query_selector(selector)
        if not element:
            return None
        return (await element.text_content() or "").strip()

    async def texts_of(self, selector: str) -> list[str]:
        texts = []
        for element in await self._page.query_selector_all(selector):
            texts.append((await element.text_content() or "").strip())
        return texts

    async def click(self, selector: str) -> bool:
        """Click the first element matching the selector."""
        element = await self._page.query_selector(selector)
        if not element:
            return False
        try:
            await element.click(timeout=self.timeout_ms)
            return True
        except PlaywrightError as e:
            logger.debug(f"Click on {selector!r} failed: {e}")
            return False

    async def click_text(
        self, selector: str, text: str, label_selector: str | None = None
    ) -> bool:
        """Click the first element whose (label) text equals ``text``.

        Handles are looked up fresh on every call because listing panels
        re-render after each click.
        """
        for element in await self._page.query_selector_all(selector):
            target = await element.query_selector(label_selector) if label_selector else element
            if not target:
                continue
            label = (await target.text_content() or "").strip()
            if label != text:
                continue
            try:
                await element.click(timeout=self.timeout_ms)
                return True
            except PlaywrightError as e:
                logger.debug(f"Click on {selector!r} ({text!r}) failed: {e}")
                return False
        return False

    async def move_pointer(self, selector: str, pacer: Pacer) -> tuple[float, float] | None:
        """Point at an element by its bounding box, along a jittered path if the policy says so.

        Returns the point the pointer ended on, or None if the element has no box.
        """
        element = await self._page.query_selector(selector)
        if not element:
            return None
        box = await element.bounding_box()
        if not box:
            return None

        target = pacer.click_point(box)
        if pacer.policy.simulate_pointer:
            for x, y in pacer.pointer_path(self._pointer, target):
                await self._page.mouse.move(x, y)
                await pacer.pause("pointer_step")
        else:
            await self._page.mouse.move(*target)
        self._pointer = target
        return target

    async def human_click(self, selector: str, pacer: Pacer) -> bool:
        """Click slightly off-centre of the element's bounding box."""
        target = await self.move_pointer(selector, pacer)
        if target is None:
            return False

        await pacer.pause("click_before")
        await self._page.mouse.click(*target)
        await pacer.pause("click_after")
        return True

    async def scroll_to_bottom(self) -> None:
        await self._page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")

    async def scroll_by(self, distance: float) -> None:
        await self._page.evaluate("(dy) => window.scrollBy(0, dy)", distance)

    async def close(self) -> None:
        await self._page.close()


@asynccontextmanager
async def open_session(
    profile: FingerprintProfile = BASIC_PROFILE,
    headless: bool | None = None,
) -> AsyncIterator[BrowserSession]:
    """Launch Chromium with the profile applied and yield a fresh session.

    The browser is always closed on exit, including when the scrape fails.
    """
    headless = settings.headless if headless is None else headless
    manager = Stealth().use_async(async_playwright()) if profile.use_stealth else async_playwright()

    async with manager as p:
        browser = await p.chromium.launch(headless=headless, args=list(profile.launch_args))
        try:
            context = await browser.new_context(**profile.context_options())
            script = profile.init_script()
            if script:
                await context.add_init_script(script)
            page = await context.new_page()
            logger.debug(f"Opened browser session with profile {profile.name!r}")
            yield BrowserSession(page)
        finally:
            try:
                await browser.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser: {e}")
