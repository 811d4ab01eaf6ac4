"""Async engine and session factory."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Models must be imported so SQLModel.metadata knows every table
import machine_registry.models  # noqa: F401
from machine_registry.config import settings

engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
    pool_recycle=300,
)

# Services keep using loaded rows after commit (e.g. to build responses)
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""
    async with async_session_maker() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections (application shutdown, CLI exit)."""
    await engine.dispose()
