"""Command-line scrape run: scrape some or all sites and store the events."""

import argparse
import asyncio
import logging
import sys

from showtimes.config import settings
from showtimes.database import create_tables
from showtimes.scrapers import SCRAPER_REGISTRY
from showtimes.services.event_store import DatabaseEventSink, EventSink, JsonFileEventSink
from showtimes.tasks.scrape_job import ScrapeSummary, SiteStatus, run_scrapers

STATUS_MARKS = {
    SiteStatus.SUCCEEDED: "✓",
    SiteStatus.PARTIAL: "~",
    SiteStatus.FAILED: "✗",
}


def print_summary(summary: ScrapeSummary) -> None:
    print()
    for report in summary.reports:
        mark = STATUS_MARKS.get(report.status, "?")
        detail = report.error or report.partial_reason or ""
        print(
            f"  {mark}  {report.site:<12} {report.theatre:<28} "
            f"{report.events:>4} events {report.saved:>4} saved  {detail}"
        )

    print()
    print(
        f"{summary.count(SiteStatus.SUCCEEDED)} succeeded, "
        f"{summary.count(SiteStatus.PARTIAL)} partial, "
        f"{summary.count(SiteStatus.FAILED)} failed; "
        f"{summary.total_events} events, {summary.total_saved} saved"
    )


async def scrape(sites: list[str] | None, json_dir: str | None, init_db: bool) -> bool:
    """Run the scrape and print a report. Returns True if no site failed."""
    sink: EventSink
    if json_dir:
        sink = JsonFileEventSink(json_dir)
    else:
        if init_db:
            await create_tables()
        sink = DatabaseEventSink()

    summary = await run_scrapers(sites, sink=sink)
    print_summary(summary)
    return not summary.has_failures


def main() -> None:
    parser = argparse.ArgumentParser(description="Scrape Portland theatre showtimes.")
    parser.add_argument(
        "--sites",
        nargs="+",
        choices=sorted(SCRAPER_REGISTRY),
        metavar="SITE",
        help=f"Sites to scrape (default: all). Choices: {', '.join(sorted(SCRAPER_REGISTRY))}",
    )
    parser.add_argument(
        "--json-dir",
        metavar="DIR",
        help="Write one JSON file per theatre into DIR instead of the database",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create the movie_events table before scraping",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ok = asyncio.run(scrape(args.sites, args.json_dir, args.init_db))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
