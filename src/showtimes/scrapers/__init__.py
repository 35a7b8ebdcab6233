"""Scraper registry for mapping site names to scraper classes."""

from typing import Type

from showtimes.scrapers.academy import AcademyScraper
from showtimes.scrapers.base import BaseScraper, ScrapeError
from showtimes.scrapers.cinema21 import Cinema21Scraper
from showtimes.scrapers.cinemagic import CinemagicScraper
from showtimes.scrapers.clinton import ClintonScraper
from showtimes.scrapers.hollywood import HollywoodScraper
from showtimes.scrapers.laurelhurst import LaurelhurstScraper
from showtimes.scrapers.living_room import LivingRoomScraper
from showtimes.scrapers.st_johns import StJohnsScraper
from showtimes.scrapers.tomorrow import TomorrowScraper

# Registry mapping site names to scraper classes, in default run order
SCRAPER_REGISTRY: dict[str, Type[BaseScraper]] = {
    scraper.name: scraper
    for scraper in (
        AcademyScraper,
        Cinema21Scraper,
        CinemagicScraper,
        ClintonScraper,
        HollywoodScraper,
        LaurelhurstScraper,
        LivingRoomScraper,
        StJohnsScraper,
        TomorrowScraper,
    )
}


def get_scraper(name: str, **kwargs) -> BaseScraper | None:
    """
    Get a scraper instance by site name.

    Args:
        name: The site name (e.g., "academy", "cinema21")
        **kwargs: Passed to the scraper constructor (session_factory, pacer, today)

    Returns:
        Scraper instance or None if the name isn't registered
    """
    scraper_class = SCRAPER_REGISTRY.get(name)
    if scraper_class:
        return scraper_class(**kwargs)
    return None


__all__ = [
    "SCRAPER_REGISTRY",
    "get_scraper",
    "BaseScraper",
    "ScrapeError",
    "AcademyScraper",
    "Cinema21Scraper",
    "CinemagicScraper",
    "ClintonScraper",
    "HollywoodScraper",
    "LaurelhurstScraper",
    "LivingRoomScraper",
    "StJohnsScraper",
    "TomorrowScraper",
]
