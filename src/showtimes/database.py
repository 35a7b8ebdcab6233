"""Database engine, session factory and schema bootstrap for movie events."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from showtimes.config import settings
from showtimes.models import Base

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,  # scrapes run hours apart; drop connections the server closed
)

# Sinks and request handlers each open their own session from here
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, committed on success."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create any missing tables (``movie_events``) on the configured database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
