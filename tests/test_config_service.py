"""Tests for SequenceConfigService."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from machine_registry.models import Category, SequenceConfig
from machine_registry.models.base import new_ulid
from machine_registry.services.sequences.config_service import SequenceConfigChanges, SequenceConfigService
from machine_registry.services.sequences.exceptions import (
    ConfigNotFound,
    DuplicateConfig,
    InvalidPrefix,
    InvalidStartingNumber,
    InvalidTemplate,
    ReferenceNotFound,
)
from machine_registry.services.sequences.scope import SequenceScope

TEMPLATE = "{category}-{sequence}"


async def test_create(db_session: AsyncSession, valve: Category) -> None:
    config = await SequenceConfigService(db_session).create(
        SequenceScope(valve.id), prefix=" vlv ", template=TEMPLATE, starting_number=10, created_by="alice"
    )
    assert config.prefix == "VLV"
    assert config.starting_number == 10
    assert config.current_sequence == 9
    assert config.is_active
    assert config.created_by == "alice"
    assert config.updated_by == "alice"


@pytest.mark.parametrize(
    "kwargs, error",
    [
        ({"template": "{sequence}"}, InvalidTemplate),
        ({"template": "{category}-001"}, InvalidTemplate),
        ({"starting_number": 0}, InvalidStartingNumber),
        ({"starting_number": -5}, InvalidStartingNumber),
        ({"prefix": "BAD PREFIX"}, InvalidPrefix),
        ({"prefix": "ABCDEFGHIJK"}, InvalidPrefix),
        ({"prefix": ""}, InvalidPrefix),
    ],
)
async def test_create_validation(db_session: AsyncSession, valve: Category, kwargs: dict, error: type) -> None:
    params = {"prefix": "VLV", "template": TEMPLATE, "starting_number": 1} | kwargs
    with pytest.raises(error):
        await SequenceConfigService(db_session).create(SequenceScope(valve.id), **params)


async def test_create_unknown_category(db_session: AsyncSession) -> None:
    with pytest.raises(ReferenceNotFound):
        await SequenceConfigService(db_session).create(SequenceScope(new_ulid()), prefix="X", template=TEMPLATE)


async def test_create_unknown_subcategory(db_session: AsyncSession, pump: Category) -> None:
    with pytest.raises(ReferenceNotFound):
        await SequenceConfigService(db_session).create(
            SequenceScope(pump.id, new_ulid()), prefix="X", template=TEMPLATE
        )


async def test_create_duplicate(db_session: AsyncSession, pump: Category, pump_config: SequenceConfig) -> None:
    with pytest.raises(DuplicateConfig) as exc_info:
        await SequenceConfigService(db_session).create(SequenceScope(pump.id), prefix="P2", template=TEMPLATE)
    assert exc_info.value.code == "DUPLICATE_SEQUENCE_CONFIG"


async def test_create_duplicate_of_inactive(
    db_session: AsyncSession, pump: Category, pump_config: SequenceConfig
) -> None:
    service = SequenceConfigService(db_session)
    await service.update(pump_config.id, SequenceConfigChanges(is_active=False))
    with pytest.raises(DuplicateConfig):
        await service.create(SequenceScope(pump.id), prefix="P2", template=TEMPLATE)


async def test_subcategory_scope_is_distinct(
    db_session: AsyncSession, pump: Category, centrifugal: Category, pump_config: SequenceConfig
) -> None:
    config = await SequenceConfigService(db_session).create(
        SequenceScope(pump.id, centrifugal.id), prefix="CF", template=TEMPLATE
    )
    assert config.subcategory_id == centrifugal.id


async def test_update_starting_number_resets_counter(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    service = SequenceConfigService(db_session)
    await service.reset(pump_config.id, 20)

    result = await service.update(pump_config.id, SequenceConfigChanges(starting_number=50, updated_by="bob"))
    assert result.config.starting_number == 50
    assert result.config.current_sequence == 49
    assert result.config.updated_by == "bob"
    assert not result.template_changed


async def test_update_template_keeps_counter(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    service = SequenceConfigService(db_session)
    await service.reset(pump_config.id, 8)

    result = await service.update(pump_config.id, SequenceConfigChanges(template="{sequence}-{category}"))
    assert result.template_changed
    assert result.previous_template == "{category}-{subcategory}-{sequence}"
    assert result.config.template == "{sequence}-{category}"
    assert result.config.current_sequence == 7


async def test_update_same_template_is_not_a_change(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    result = await SequenceConfigService(db_session).update(
        pump_config.id, SequenceConfigChanges(template=pump_config.template)
    )
    assert not result.template_changed


async def test_update_invalid_template(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    with pytest.raises(InvalidTemplate):
        await SequenceConfigService(db_session).update(pump_config.id, SequenceConfigChanges(template="{category}"))


async def test_update_prefix(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    result = await SequenceConfigService(db_session).update(pump_config.id, SequenceConfigChanges(prefix="pm-1"))
    assert result.config.prefix == "PM-1"


async def test_update_missing(db_session: AsyncSession) -> None:
    with pytest.raises(ConfigNotFound):
        await SequenceConfigService(db_session).update(new_ulid(), SequenceConfigChanges(is_active=False))


async def test_reset(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    config = await SequenceConfigService(db_session).reset(pump_config.id, 1000, updated_by="carol")
    assert config.starting_number == 1000
    assert config.current_sequence == 999
    assert config.updated_by == "carol"


async def test_reset_invalid(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    with pytest.raises(InvalidStartingNumber):
        await SequenceConfigService(db_session).reset(pump_config.id, 0)


async def test_get_for_scope_has_no_fallback(
    db_session: AsyncSession, pump: Category, centrifugal: Category, pump_config: SequenceConfig
) -> None:
    service = SequenceConfigService(db_session)
    assert (await service.get_for_scope(SequenceScope(pump.id))).id == pump_config.id
    with pytest.raises(ConfigNotFound):
        await service.get_for_scope(SequenceScope(pump.id, centrifugal.id))


async def test_delete(db_session: AsyncSession, pump_config: SequenceConfig) -> None:
    service = SequenceConfigService(db_session)
    await service.delete(pump_config.id)
    with pytest.raises(ConfigNotFound):
        await service.get(pump_config.id)
