"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from showtimes.api.routes import admin, events, health
from showtimes.config import settings
from showtimes.database import create_tables
from showtimes.services import log_stream
from showtimes.tasks.scrape_job import run_scrapers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Scraper logs go to the admin stream; the movie_events table must exist before any run
    logging.getLogger("showtimes").setLevel(settings.log_level)
    log_stream.install()
    await create_tables()

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        run_scrapers,
        trigger=CronTrigger(hour=settings.scrape_cron_hours, minute=0, timezone=settings.timezone),
        id="scheduled_scrape",
        name="Scrape every theatre",
        replace_existing=True,
        max_instances=1,
    )
    scheduler.start()
    logger.info(f"Scheduler started: scrape registered daily at hours {settings.scrape_cron_hours}")

    yield

    # Let a running scrape finish on its own; no new runs start
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")


app = FastAPI(
    title="Showtimes API",
    description="Movie showtime aggregator for Portland theatres",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(events.router, prefix="/api", tags=["events"])
app.include_router(admin.router, prefix="/api", tags=["admin"])
