"""Scrape job that runs the theatre scrapers and stores their events."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from showtimes.config import settings
from showtimes.scrapers import SCRAPER_REGISTRY, BaseScraper, get_scraper
from showtimes.scrapers.models import CanonicalEvent
from showtimes.services.event_store import DatabaseEventSink, EventSink

logger = logging.getLogger(__name__)


class SiteStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class SiteReport:
    """Outcome of one site's scrape."""

    site: str
    theatre: str = ""
    status: SiteStatus = SiteStatus.PENDING
    events: int = 0
    saved: int = 0
    error: str | None = None
    partial_reason: str | None = None


@dataclass
class ScrapeSummary:
    """Per-site reports plus every event produced, sorted by (date, title)."""

    reports: list[SiteReport]
    events: list[CanonicalEvent] = field(default_factory=list)

    @property
    def total_events(self) -> int:
        return len(self.events)

    @property
    def total_saved(self) -> int:
        return sum(report.saved for report in self.reports)

    def count(self, status: SiteStatus) -> int:
        return sum(1 for report in self.reports if report.status == status)

    @property
    def has_failures(self) -> bool:
        return self.count(SiteStatus.FAILED) > 0


def _unique(names: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for name in names:
        if name not in seen:
            seen.append(name)
    return seen


async def _run_site(scraper: BaseScraper, report: SiteReport, budget: float) -> list[CanonicalEvent]:
    """Run one scraper within its wall-clock budget and record the outcome."""
    report.status = SiteStatus.RUNNING
    logger.info(f"Starting {report.site} ({report.theatre})")

    try:
        events = await asyncio.wait_for(scraper.scrape(), timeout=budget)
    except asyncio.TimeoutError:
        events = scraper.salvage()
        reason = f"exceeded its {budget:.0f}s budget"
        if events:
            report.status = SiteStatus.PARTIAL
            report.partial_reason = reason
            logger.warning(f"{report.site} {reason}; keeping {len(events)} events")
        else:
            report.status = SiteStatus.FAILED
            report.error = reason
            logger.error(f"{report.site} {reason} with nothing collected")
        report.events = len(events)
        return events
    except Exception as e:
        report.status = SiteStatus.FAILED
        report.error = str(e) or type(e).__name__
        logger.error(f"Error scraping {report.site}: {e}", exc_info=True)
        return []

    report.events = len(events)
    if scraper.partial_reason:
        if events:
            report.status = SiteStatus.PARTIAL
            report.partial_reason = scraper.partial_reason
        else:
            report.status = SiteStatus.FAILED
            report.error = scraper.partial_reason
    else:
        report.status = SiteStatus.SUCCEEDED

    logger.info(f"Finished {report.site}: {report.status.value}, {len(events)} events")
    return events


async def run_scrapers(
    site_names: Iterable[str] | None = None,
    sink: EventSink | None = None,
    concurrency: int | None = None,
    site_budget: float | None = None,
    scraper_options: dict | None = None,
) -> ScrapeSummary:
    """
    Scrape the named sites (all registered sites by default) and store the results.

    A failing site never stops the others. Once every site has finished, all
    events are sorted by (date, title) and each theatre's batch replaces its
    previous rows in the sink. Failed sites and sites that produced nothing
    are not written, so their existing rows survive.

    Args:
        site_names: Registry names to run; unknown names are reported as failed
        sink: Where to store events (defaults to the database)
        concurrency: Maximum number of sites scraped at once
        site_budget: Wall-clock limit per site, in seconds
        scraper_options: Keyword arguments for every scraper constructor

    Returns:
        ScrapeSummary with one report per requested site
    """
    names = _unique(site_names) if site_names else list(SCRAPER_REGISTRY)
    sink = sink if sink is not None else DatabaseEventSink()
    budget = site_budget or settings.site_budget_seconds
    semaphore = asyncio.Semaphore(concurrency or settings.scrape_concurrency)

    reports: dict[str, SiteReport] = {name: SiteReport(site=name) for name in names}
    scrapers: dict[str, BaseScraper] = {}
    for name in names:
        scraper = get_scraper(name, **(scraper_options or {}))
        if scraper is None:
            logger.warning(f"No scraper registered for {name!r}")
            reports[name].status = SiteStatus.FAILED
            reports[name].error = "unknown site"
            continue
        reports[name].theatre = scraper.theatre_name
        scrapers[name] = scraper

    logger.info(f"Scraping {len(scrapers)} sites: {', '.join(scrapers)}")

    async def run_one(name: str) -> list[CanonicalEvent]:
        async with semaphore:
            return await _run_site(scrapers[name], reports[name], budget)

    results = await asyncio.gather(*(run_one(name) for name in scrapers))
    all_events = sorted(
        (event for events in results for event in events), key=lambda event: event.sort_key
    )

    for name in scrapers:
        report = reports[name]
        if report.status == SiteStatus.FAILED or not report.events:
            continue
        batch = [event for event in all_events if event.theatre == report.theatre]
        try:
            report.saved = await sink.replace_theatre(report.theatre, batch)
        except Exception as e:
            report.status = SiteStatus.FAILED
            report.error = f"save failed: {e}"
            logger.error(f"Error saving events for {report.theatre}: {e}", exc_info=True)

    summary = ScrapeSummary(reports=list(reports.values()), events=all_events)
    logger.info(
        f"Scrape complete: {summary.count(SiteStatus.SUCCEEDED)} succeeded, "
        f"{summary.count(SiteStatus.PARTIAL)} partial, "
        f"{summary.count(SiteStatus.FAILED)} failed, "
        f"{summary.total_events} events, {summary.total_saved} saved"
    )
    return summary
