"""Shared test fixtures."""

import pytest
from fastapi import FastAPI

from showtimes.api.routes import events, health


@pytest.fixture
def test_app() -> FastAPI:
    """Minimal FastAPI app without the APScheduler lifespan, for API tests."""
    app = FastAPI()
    app.include_router(health.router)
    app.include_router(events.router, prefix="/api")
    return app
