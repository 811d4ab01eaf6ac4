"""Sequence configuration management service."""

import re
from dataclasses import dataclass

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from machine_registry.models.base import utc_now
from machine_registry.models.sequence_config import SequenceConfig
from machine_registry.services.categories.category_service import CategoryService
from machine_registry.services.sequences.counter_store import SequenceCounterStore
from machine_registry.services.sequences.exceptions import (
    ConfigNotFound,
    DuplicateConfig,
    InvalidPrefix,
    InvalidStartingNumber,
)
from machine_registry.services.sequences.scope import SequenceScope, resolve_scope_slugs
from machine_registry.services.sequences.template import validate_template

logger = structlog.get_logger(__name__)

_PREFIX_RE = re.compile(r"^[A-Z0-9-]{1,10}$")


def normalize_prefix(prefix: str) -> str:
    """Uppercase and validate a sequence prefix."""
    normalized = prefix.strip().upper()
    if not _PREFIX_RE.match(normalized):
        raise InvalidPrefix()
    return normalized


def validate_starting_number(starting_number: int) -> int:
    if starting_number < 1:
        raise InvalidStartingNumber()
    return starting_number


@dataclass
class SequenceConfigChanges:
    """Fields to change on a config. None means "leave as is"."""

    prefix: str | None = None
    template: str | None = None
    starting_number: int | None = None
    is_active: bool | None = None
    updated_by: str | None = None


@dataclass
class SequenceConfigUpdate:
    """Result of a config update."""

    config: SequenceConfig
    previous_template: str

    @property
    def template_changed(self) -> bool:
        return self.config.template != self.previous_template


class SequenceConfigService:
    """CRUD for sequence configurations (one per category/subcategory scope)."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.counter_store = SequenceCounterStore(session)
        self.categories = CategoryService(session)

    async def get(self, config_id: str) -> SequenceConfig:
        config = await self.counter_store.get_by_id(config_id)
        if config is None:
            raise ConfigNotFound()
        return config

    async def get_for_scope(self, scope: SequenceScope) -> SequenceConfig:
        """Get the config bound to exactly this scope (no category-wide fallback)."""
        config = await self.counter_store.get_exact(scope)
        if config is None:
            raise ConfigNotFound()
        return config

    async def list_configs(self) -> list[SequenceConfig]:
        return await self.counter_store.list_all()

    async def create(
        self,
        scope: SequenceScope,
        *,
        prefix: str,
        template: str,
        starting_number: int = 1,
        created_by: str | None = None,
    ) -> SequenceConfig:
        """Create a config. The first generated number will be ``starting_number``.

        Raises:
            InvalidTemplate, InvalidStartingNumber, InvalidPrefix: Invalid input.
            ReferenceNotFound: Category or subcategory does not exist.
            DuplicateConfig: The scope already has a config.
        """
        validate_template(template)
        validate_starting_number(starting_number)
        prefix = normalize_prefix(prefix)

        await resolve_scope_slugs(self.categories, scope)

        if await self.counter_store.get_exact(scope) is not None:
            raise DuplicateConfig()

        config = SequenceConfig(
            category_id=scope.category_id,
            subcategory_id=scope.subcategory_id,
            prefix=prefix,
            template=template,
            starting_number=starting_number,
            current_sequence=starting_number - 1,  # Incremented on first use
            is_active=True,
            created_by=created_by,
            updated_by=created_by,
        )
        self.session.add(config)
        try:
            await self.session.commit()
        except IntegrityError as e:
            # Concurrent create for the same scope won the unique constraint
            await self.session.rollback()
            if "uq_sequence_config_scope" in str(e) or "unique" in str(e).lower():
                raise DuplicateConfig() from e
            raise

        logger.info(
            "Created sequence config",
            config_id=config.id,
            category_id=scope.category_id,
            subcategory_id=scope.subcategory_id,
            template=template,
            starting_number=starting_number,
        )
        return config

    async def update(self, config_id: str, changes: SequenceConfigChanges) -> SequenceConfigUpdate:
        """Update a config.

        Changing ``starting_number`` restarts numbering at that value. Changing
        only the template keeps the counter, so numbering continues and only
        the rendering of new identifiers changes. Existing identifiers are not
        touched; see ReformatService for that.
        """
        config = await self.get(config_id)
        previous_template = config.template

        if changes.template is not None:
            validate_template(changes.template)
        if changes.starting_number is not None:
            validate_starting_number(changes.starting_number)
        prefix = normalize_prefix(changes.prefix) if changes.prefix is not None else None

        if prefix is not None:
            config.prefix = prefix
        if changes.template is not None:
            config.template = changes.template
        if changes.starting_number is not None:
            config.starting_number = changes.starting_number
            config.current_sequence = changes.starting_number - 1
        if changes.is_active is not None:
            config.is_active = changes.is_active
        if changes.updated_by is not None:
            config.updated_by = changes.updated_by
        config.updated_at = utc_now()

        await self.session.commit()

        result = SequenceConfigUpdate(config=config, previous_template=previous_template)
        logger.info(
            "Updated sequence config",
            config_id=config.id,
            template_changed=result.template_changed,
            current_sequence=config.current_sequence,
        )
        return result

    async def reset(self, config_id: str, new_starting_number: int, *, updated_by: str | None = None) -> SequenceConfig:
        """Restart numbering at ``new_starting_number``, unconditionally."""
        validate_starting_number(new_starting_number)
        config = await self.get(config_id)

        config.starting_number = new_starting_number
        config.current_sequence = new_starting_number - 1
        if updated_by is not None:
            config.updated_by = updated_by
        config.updated_at = utc_now()
        await self.session.commit()

        logger.info("Reset sequence", config_id=config.id, starting_number=new_starting_number)
        return config

    async def delete(self, config_id: str) -> None:
        config = await self.get(config_id)
        await self.session.delete(config)
        await self.session.commit()
        logger.info("Deleted sequence config", config_id=config_id)
