"""Movie event API endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from showtimes.database import get_db
from showtimes.models.movie_event import MovieEvent
from showtimes.schemas.movie_event import MovieEventResponse

router = APIRouter()


@router.get("/events", response_model=list[MovieEventResponse])
async def get_events(
    theatre: str | None = Query(default=None, description="Exact theatre name"),
    date_from: date | None = Query(default=None, description="First day to include"),
    date_to: date | None = Query(default=None, description="Last day to include"),
    db: AsyncSession = Depends(get_db),
) -> list[MovieEvent]:
    """
    Get stored events ordered by (date, title).

    Args:
        theatre: Only events at this theatre
        date_from: Only events on or after this day
        date_to: Only events on or before this day
        db: Database session

    Returns:
        List of movie events
    """
    query = select(MovieEvent)
    if theatre:
        query = query.where(MovieEvent.theatre == theatre)
    if date_from:
        query = query.where(MovieEvent.date >= date_from)
    if date_to:
        query = query.where(MovieEvent.date <= date_to)
    query = query.order_by(MovieEvent.date, MovieEvent.title)

    result = await db.execute(query)
    return list(result.scalars().all())
