"""Admin API endpoints for manual operations."""

import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from showtimes.scrapers import SCRAPER_REGISTRY
from showtimes.services.log_stream import LogStreamHandler, format_sse, log_stream
from showtimes.tasks.scrape_job import ScrapeSummary, run_scrapers

logger = logging.getLogger(__name__)
router = APIRouter()


class SiteInfo(BaseModel):
    name: str
    theatre: str
    url: str


class ScrapeRequest(BaseModel):
    """Request model for triggering a scrape. No sites means every site."""

    sites: list[str] | None = None


class SiteScrapeResult(BaseModel):
    """Result for a single site scrape."""

    site: str
    theatre: str
    status: str
    events: int
    saved: int
    error: str | None = None
    partial_reason: str | None = None


class ScrapeResponse(BaseModel):
    """Response for scrape operation."""

    status: str
    results: list[SiteScrapeResult]
    total_events: int
    total_saved: int


def summary_response(summary: ScrapeSummary) -> ScrapeResponse:
    return ScrapeResponse(
        status="completed_with_failures" if summary.has_failures else "completed",
        results=[
            SiteScrapeResult(
                site=report.site,
                theatre=report.theatre,
                status=report.status.value,
                events=report.events,
                saved=report.saved,
                error=report.error,
                partial_reason=report.partial_reason,
            )
            for report in summary.reports
        ],
        total_events=summary.total_events,
        total_saved=summary.total_saved,
    )


@router.get("/admin/sites", response_model=list[SiteInfo])
async def list_sites() -> list[SiteInfo]:
    """List every registered site scraper."""
    return [
        SiteInfo(name=name, theatre=scraper.theatre_name, url=scraper.base_url)
        for name, scraper in SCRAPER_REGISTRY.items()
    ]


@router.post("/admin/scrape", response_model=ScrapeResponse)
async def trigger_scrape(request: ScrapeRequest) -> ScrapeResponse:
    """
    Scrape the requested sites and store their events.

    Note: This is a synchronous operation that can take several minutes
    when the calendar sites are included.
    """
    if request.sites:
        unknown = [name for name in request.sites if name not in SCRAPER_REGISTRY]
        if unknown:
            raise HTTPException(status_code=404, detail=f"Unknown sites: {', '.join(unknown)}")

    summary = await run_scrapers(request.sites)
    return summary_response(summary)


@router.post("/admin/scrape-all")
async def trigger_scrape_all(background_tasks: BackgroundTasks) -> dict[str, str]:
    """Trigger a scrape of every site as a background task.

    Returns immediately; follow progress on /admin/logs.
    """
    background_tasks.add_task(run_scrapers)
    return {"status": "started"}


async def stream_entries(handler: LogStreamHandler, follow: bool = True) -> AsyncIterator[str]:
    """Yield log entries as server-sent events, starting with the buffered history."""
    if not follow:
        for entry in handler.history():
            yield format_sse(entry)
        return

    queue = handler.subscribe()
    logger.debug(f"Log stream client connected ({handler.client_count} total)")
    try:
        while True:
            entry = await queue.get()
            yield format_sse(entry)
    finally:
        handler.unsubscribe(queue)
        logger.debug(f"Log stream client disconnected ({handler.client_count} left)")


@router.get("/admin/logs")
async def stream_logs(
    follow: bool = Query(default=True, description="Keep the stream open for new lines"),
) -> StreamingResponse:
    """Scrape logs as a text/event-stream."""
    return StreamingResponse(
        stream_entries(log_stream, follow=follow),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.delete("/admin/logs")
async def clear_logs() -> dict[str, str]:
    """Drop the buffered log history."""
    log_stream.clear_history()
    return {"status": "cleared"}
