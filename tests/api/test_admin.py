"""Tests for the admin scrape and log API endpoints."""

import logging
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from showtimes.api.routes import admin
from showtimes.services.log_stream import LogStreamHandler
from showtimes.tasks.scrape_job import ScrapeSummary, SiteReport, SiteStatus

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_summary() -> ScrapeSummary:
    return ScrapeSummary(
        reports=[
            SiteReport(
                site="cinema21", theatre="Cinema 21", status=SiteStatus.SUCCEEDED, events=12, saved=12
            ),
            SiteReport(
                site="hollywood",
                theatre="Hollywood Theater",
                status=SiteStatus.PARTIAL,
                events=40,
                saved=40,
                partial_reason="calendar would not move past October 2025",
            ),
            SiteReport(
                site="academy",
                theatre="Academy Theater",
                status=SiteStatus.FAILED,
                error="Academy: no date page could be loaded",
            ),
        ]
    )


@pytest.fixture
def admin_app() -> FastAPI:
    app = FastAPI()
    app.include_router(admin.router)
    return app


@pytest.fixture
def handler():
    stream = LogStreamHandler(history_size=10)
    logger = logging.getLogger("showtimes.tests.admin")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(stream)
    with patch("showtimes.api.routes.admin.log_stream", stream):
        yield stream
    logger.removeHandler(stream)


# ---------------------------------------------------------------------------
# GET /admin/sites
# ---------------------------------------------------------------------------


async def test_lists_registered_sites(admin_app: FastAPI) -> None:
    async with AsyncClient(transport=ASGITransport(app=admin_app), base_url="http://test") as client:
        response = await client.get("/admin/sites")

    assert response.status_code == 200
    sites = {site["name"]: site for site in response.json()}
    assert len(sites) == 9
    assert sites["cinema21"] == {
        "name": "cinema21",
        "theatre": "Cinema 21",
        "url": "https://www.cinema21.com",
    }


# ---------------------------------------------------------------------------
# POST /admin/scrape
# ---------------------------------------------------------------------------


async def test_scrape_returns_404_for_unknown_site(admin_app: FastAPI) -> None:
    with patch("showtimes.api.routes.admin.run_scrapers", new=AsyncMock()) as run:
        async with AsyncClient(
            transport=ASGITransport(app=admin_app), base_url="http://test"
        ) as client:
            response = await client.post("/admin/scrape", json={"sites": ["cinema21", "imax"]})

    assert response.status_code == 404
    assert "imax" in response.json()["detail"]
    run.assert_not_awaited()


async def test_scrape_reports_each_site(admin_app: FastAPI) -> None:
    run = AsyncMock(return_value=make_summary())
    with patch("showtimes.api.routes.admin.run_scrapers", new=run):
        async with AsyncClient(
            transport=ASGITransport(app=admin_app), base_url="http://test"
        ) as client:
            response = await client.post(
                "/admin/scrape", json={"sites": ["cinema21", "hollywood", "academy"]}
            )

    assert response.status_code == 200
    run.assert_awaited_once_with(["cinema21", "hollywood", "academy"])
    data = response.json()
    assert data["status"] == "completed_with_failures"
    assert data["total_saved"] == 52
    statuses = {r["site"]: r["status"] for r in data["results"]}
    assert statuses == {"cinema21": "succeeded", "hollywood": "partial", "academy": "failed"}
    hollywood = data["results"][1]
    assert hollywood["partial_reason"] == "calendar would not move past October 2025"


async def test_scrape_without_sites_runs_everything(admin_app: FastAPI) -> None:
    run = AsyncMock(return_value=ScrapeSummary(reports=[]))
    with patch("showtimes.api.routes.admin.run_scrapers", new=run):
        async with AsyncClient(
            transport=ASGITransport(app=admin_app), base_url="http://test"
        ) as client:
            response = await client.post("/admin/scrape", json={})

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    run.assert_awaited_once_with(None)


async def test_scrape_all_runs_in_background(admin_app: FastAPI) -> None:
    run = AsyncMock(return_value=ScrapeSummary(reports=[]))
    with patch("showtimes.api.routes.admin.run_scrapers", new=run):
        async with AsyncClient(
            transport=ASGITransport(app=admin_app), base_url="http://test"
        ) as client:
            response = await client.post("/admin/scrape-all")

    assert response.status_code == 200
    assert response.json() == {"status": "started"}
    run.assert_awaited_once()


# ---------------------------------------------------------------------------
# /admin/logs
# ---------------------------------------------------------------------------


async def test_log_history_as_event_stream(admin_app: FastAPI, handler) -> None:
    logger = logging.getLogger("showtimes.tests.admin")
    logger.info("Starting cinema21 (Cinema 21)")
    logger.warning("hollywood: stopping early")

    async with AsyncClient(transport=ASGITransport(app=admin_app), base_url="http://test") as client:
        response = await client.get("/admin/logs", params={"follow": "false"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    frames = [frame for frame in response.text.split("\n\n") if frame]
    assert len(frames) == 2
    assert frames[0].startswith("data: ")
    assert '"type": "warn"' in frames[1]


async def test_follow_stream_unsubscribes_on_close(handler) -> None:
    logger = logging.getLogger("showtimes.tests.admin")
    logger.info("first line")

    stream = admin.stream_entries(handler)
    frame = await stream.__anext__()
    assert "first line" in frame
    assert handler.client_count == 1

    await stream.aclose()
    assert handler.client_count == 0


async def test_clear_logs(admin_app: FastAPI, handler) -> None:
    logging.getLogger("showtimes.tests.admin").info("old line")

    async with AsyncClient(transport=ASGITransport(app=admin_app), base_url="http://test") as client:
        response = await client.delete("/admin/logs")

    assert response.json() == {"status": "cleared"}
    assert [e["message"] for e in handler.history()] == ["--- Logs cleared ---"]
