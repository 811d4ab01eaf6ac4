"""Shared pytest fixtures.

Tests run against an in-memory SQLite database (aiosqlite) with a fresh
schema per test, and against the FastAPI app with the session dependency
overridden. Dramatiq uses the in-process StubBroker.
"""

import os

# Must be set before machine_registry.config is imported
os.environ["DRAMATIQ_BROKER"] = "stub"

from collections.abc import AsyncGenerator, Generator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from machine_registry.db import get_session  # noqa: E402
from machine_registry.main import app  # noqa: E402
from machine_registry.models import Category, Machine, SequenceConfig  # noqa: E402
from machine_registry.services.categories.category_service import CategoryService  # noqa: E402
from machine_registry.services.machines.machine_service import MachineService  # noqa: E402
from machine_registry.services.sequences.config_service import SequenceConfigService  # noqa: E402
from machine_registry.services.sequences.scope import SequenceScope  # noqa: E402
from machine_registry.tasks import broker  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
test_session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


# pysqlite/aiosqlite manage transactions themselves, which breaks SAVEPOINT.
# Let SQLAlchemy emit BEGIN instead.
@event.listens_for(test_engine.sync_engine, "connect")
def _disable_driver_transactions(dbapi_connection: Any, connection_record: Any) -> None:
    dbapi_connection.isolation_level = None


@event.listens_for(test_engine.sync_engine, "begin")
def _emit_begin(conn: Any) -> None:
    conn.exec_driver_sql("BEGIN")


@pytest_asyncio.fixture(autouse=True)
async def setup_database() -> AsyncGenerator[None]:
    """Create and drop all tables for each test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


@pytest.fixture(autouse=True)
def stub_broker() -> Generator[Any]:
    broker.flush_all()
    yield broker
    broker.flush_all()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession]:
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """HTTP client bound to the app, sharing the test session."""

    async def _get_test_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _get_test_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest_asyncio.fixture
async def pump(db_session: AsyncSession) -> Category:
    return await CategoryService(db_session).create_category(name="Pump", slug="pump")


@pytest_asyncio.fixture
async def centrifugal(db_session: AsyncSession, pump: Category) -> Category:
    return await CategoryService(db_session).create_category(name="Centrifugal", slug="centrifugal", parent_id=pump.id)


@pytest_asyncio.fixture
async def valve(db_session: AsyncSession) -> Category:
    return await CategoryService(db_session).create_category(name="Valve", slug="valve")


@pytest_asyncio.fixture
async def pump_config(db_session: AsyncSession, pump: Category) -> SequenceConfig:
    """Category-wide config for pumps: PUMP-001, PUMP-002, ..."""
    return await SequenceConfigService(db_session).create(
        SequenceScope(pump.id),
        prefix="pmp",
        template="{category}-{subcategory}-{sequence}",
    )


@pytest_asyncio.fixture
async def add_machine(db_session: AsyncSession):  # type: ignore[no-untyped-def]
    """Factory creating a live machine with a given identifier."""

    async def _add(category: Category, machine_sequence: str | None, subcategory: Category | None = None) -> Machine:
        return await MachineService(db_session).create_machine(
            category_id=category.id,
            subcategory_id=subcategory.id if subcategory else None,
            location="Hall A",
            machine_sequence=machine_sequence,
        )

    return _add
