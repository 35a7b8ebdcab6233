"""Health check endpoint."""

from fastapi import APIRouter

from showtimes.scrapers import SCRAPER_REGISTRY

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check() -> dict[str, str | int]:
    """Liveness check; also reports how many site scrapers are registered."""
    return {"status": "ok", "sites": len(SCRAPER_REGISTRY)}
