"""Shared fixtures for scraper tests: a mocked browser session and a pacer that never sleeps."""

import random
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from showtimes.scrapers.pacing import Pacer


@pytest.fixture
def quiet_pacer() -> Pacer:
    return Pacer(rng=random.Random(0), sleep=AsyncMock())


@pytest.fixture
def make_session():
    """Factory for a BrowserSession stand-in where every step succeeds by default."""

    def _make(content: str | list[str] = "<html></html>", **overrides) -> MagicMock:
        session = MagicMock()
        session.url = "https://theatre.example.com/"
        session.goto = AsyncMock(return_value=True)
        session.wait_for_selector = AsyncMock(return_value=True)
        session.wait_for_function = AsyncMock(return_value=True)
        session.evaluate = AsyncMock(return_value=None)
        if isinstance(content, list):
            session.content = AsyncMock(side_effect=content)
        else:
            session.content = AsyncMock(return_value=content)
        session.title = AsyncMock(return_value="Now Playing")
        session.body_text = AsyncMock(return_value="Now playing " * 100)
        session.count = AsyncMock(return_value=1)
        session.text_of = AsyncMock(return_value=None)
        session.texts_of = AsyncMock(return_value=[])
        session.click = AsyncMock(return_value=True)
        session.click_text = AsyncMock(return_value=True)
        session.human_click = AsyncMock(return_value=True)
        session.move_pointer = AsyncMock(return_value=(120.0, 80.0))
        session.scroll_by = AsyncMock()
        session.scroll_to_bottom = AsyncMock()
        for name, value in overrides.items():
            setattr(session, name, value)
        return session

    return _make


@pytest.fixture
def session_factory():
    """Wrap a session stand-in in the context-manager factory scrapers expect."""

    def _factory_for(session: MagicMock):
        @asynccontextmanager
        async def _open(profile):
            yield session

        return _open

    return _factory_for
