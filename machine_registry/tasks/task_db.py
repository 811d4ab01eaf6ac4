"""Database session utilities for Dramatiq background tasks."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from machine_registry.config import settings


@asynccontextmanager
async def task_db_session() -> AsyncGenerator[AsyncSession]:
    """Provide a database session bound to the current event loop.

    Every ``asyncio.run()`` in an actor starts a new loop, so the engine is
    created here and disposed on exit instead of sharing the API's pool.
    """
    engine = create_async_engine(
        settings.database_url,
        echo=False,
        future=True,
        pool_size=2,
        max_overflow=3,
        pool_pre_ping=True,
    )
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise
    finally:
        await engine.dispose()
