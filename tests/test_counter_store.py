"""Tests for SequenceCounterStore."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from machine_registry.models import Category, SequenceConfig
from machine_registry.models.base import new_ulid
from machine_registry.services.sequences.config_service import SequenceConfigChanges, SequenceConfigService
from machine_registry.services.sequences.counter_store import SequenceCounterStore
from machine_registry.services.sequences.exceptions import ConfigNotFound
from machine_registry.services.sequences.scope import SequenceScope


async def test_get_exact_scope(db_session: AsyncSession, pump: Category, pump_config: SequenceConfig) -> None:
    config = await SequenceCounterStore(db_session).get(SequenceScope(pump.id))
    assert config is not None
    assert config.id == pump_config.id


async def test_get_falls_back_to_category_wide(
    db_session: AsyncSession, pump: Category, centrifugal: Category, pump_config: SequenceConfig
) -> None:
    config = await SequenceCounterStore(db_session).get(SequenceScope(pump.id, centrifugal.id))
    assert config is not None
    assert config.id == pump_config.id


async def test_get_prefers_subcategory_config(
    db_session: AsyncSession, pump: Category, centrifugal: Category, pump_config: SequenceConfig
) -> None:
    sub_config = await SequenceConfigService(db_session).create(
        SequenceScope(pump.id, centrifugal.id), prefix="CF", template="{category}-{subcategory}-{sequence}"
    )
    store = SequenceCounterStore(db_session)

    config = await store.get(SequenceScope(pump.id, centrifugal.id))
    assert config is not None
    assert config.id == sub_config.id

    config = await store.get(SequenceScope(pump.id))
    assert config is not None
    assert config.id == pump_config.id


async def test_get_ignores_inactive(db_session: AsyncSession, pump: Category, pump_config: SequenceConfig) -> None:
    await SequenceConfigService(db_session).update(pump_config.id, SequenceConfigChanges(is_active=False))
    store = SequenceCounterStore(db_session)

    assert await store.get(SequenceScope(pump.id)) is None
    exact = await store.get_exact(SequenceScope(pump.id))
    assert exact is not None
    assert exact.id == pump_config.id


async def test_get_without_config(db_session: AsyncSession, valve: Category) -> None:
    assert await SequenceCounterStore(db_session).get(SequenceScope(valve.id)) is None


async def test_blank_subcategory_is_category_wide(
    db_session: AsyncSession, pump: Category, pump_config: SequenceConfig
) -> None:
    scope = SequenceScope(pump.id, "  ")
    assert scope.is_category_wide
    config = await SequenceCounterStore(db_session).get_exact(scope)
    assert config is not None
    assert config.id == pump_config.id


async def test_reserve_next_increments(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    store = SequenceCounterStore(db_session)
    assert await store.reserve_next(pump_config.id) == 1
    assert await store.reserve_next(pump_config.id) == 2
    await db_session.commit()

    await db_session.refresh(pump_config)
    assert pump_config.current_sequence == 2


async def test_reserve_next_rolled_back(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    store = SequenceCounterStore(db_session)
    await store.reserve_next(pump_config.id)
    await db_session.rollback()

    await db_session.refresh(pump_config)
    assert pump_config.current_sequence == 0


async def test_reserve_next_unknown_config(db_session: AsyncSession) -> None:
    with pytest.raises(ConfigNotFound):
        await SequenceCounterStore(db_session).reserve_next(new_ulid())


async def test_advance(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    config = await SequenceCounterStore(db_session).advance(pump_config.id, 41)
    assert config.current_sequence == 41


async def test_list_all(db_session: AsyncSession, pump_config: SequenceConfig, valve: Category) -> None:
    valve_config = await SequenceConfigService(db_session).create(
        SequenceScope(valve.id), prefix="VLV", template="{category}-{sequence}"
    )
    configs = await SequenceCounterStore(db_session).list_all()
    assert {c.id for c in configs} == {pump_config.id, valve_config.id}
