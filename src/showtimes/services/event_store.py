"""Persistence sinks for canonical events.

Every sink has the same contract: ``replace_theatre`` deletes everything
stored for one theatre and writes the new batch in its place. Writes for the
same theatre are serialised; different theatres never touch each other's rows.
"""

import asyncio
import json
import logging
import weakref
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from showtimes.database import AsyncSessionLocal
from showtimes.models.movie_event import MovieEvent
from showtimes.scrapers.models import CanonicalEvent
from showtimes.utils.text import slugify

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    async def replace_theatre(self, theatre: str, events: Sequence[CanonicalEvent]) -> int:
        """Replace all stored events for ``theatre``. Returns the number written."""
        ...


class _TheatreLocks:
    """One lock per theatre, per running event loop."""

    def __init__(self) -> None:
        self._locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, dict[str, asyncio.Lock]] = (
            weakref.WeakKeyDictionary()
        )

    def __call__(self, theatre: str) -> asyncio.Lock:
        locks = self._locks.setdefault(asyncio.get_running_loop(), {})
        return locks.setdefault(theatre, asyncio.Lock())


# Shared by every sink instance: overlapping runs never interleave writes for a theatre
_THEATRE_LOCKS = _TheatreLocks()


class DatabaseEventSink:
    """Writes events to the ``movie_events`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory or AsyncSessionLocal
        self._lock = _THEATRE_LOCKS

    async def replace_theatre(self, theatre: str, events: Sequence[CanonicalEvent]) -> int:
        """
        Delete the theatre's rows, then insert each event in its own savepoint.

        A rejected row is logged and skipped; the rest of the batch is still
        committed.
        """
        saved = 0
        async with self._lock(theatre):
            async with self._session_factory() as db:
                result = await db.execute(delete(MovieEvent).where(MovieEvent.theatre == theatre))
                logger.info(f"Deleted {result.rowcount} existing events for {theatre}")

                for event in events:
                    try:
                        async with db.begin_nested():
                            db.add(MovieEvent.from_canonical(event))
                            await db.flush()
                        saved += 1
                    except SQLAlchemyError as e:
                        logger.warning(
                            f"Failed to save {event.title!r} on {event.date} at {theatre}: {e}"
                        )

                await db.commit()

        logger.info(f"Saved {saved}/{len(events)} events for {theatre}")
        return saved


class JsonFileEventSink:
    """Writes one ``<theatre-slug>.json`` file per theatre, replacing it each run."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self._lock = _THEATRE_LOCKS

    def path_for(self, theatre: str) -> Path:
        return self.directory / f"{slugify(theatre)}.json"

    async def replace_theatre(self, theatre: str, events: Sequence[CanonicalEvent]) -> int:
        async with self._lock(theatre):
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self.path_for(theatre)
            payload = [event.to_dict() for event in events]
            path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

        logger.info(f"Wrote {len(events)} events for {theatre} to {path}")
        return len(events)
