"""Persistence of per-scope sequence counters."""

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select
from sqlmodel.sql.expression import SelectOfScalar

from machine_registry.models.base import utc_now
from machine_registry.models.sequence_config import SequenceConfig
from machine_registry.services.sequences.exceptions import ConfigNotFound
from machine_registry.services.sequences.scope import SequenceScope

logger = structlog.get_logger(__name__)


class SequenceCounterStore:
    """Reads sequence configs and advances their counters.

    ``current_sequence`` is only mutated here (and by explicit config resets).
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _scope_statement(scope: SequenceScope) -> SelectOfScalar[SequenceConfig]:
        subcategory_clause = (
            col(SequenceConfig.subcategory_id).is_(None)
            if scope.subcategory_id is None
            else col(SequenceConfig.subcategory_id) == scope.subcategory_id
        )
        return select(SequenceConfig).where(
            col(SequenceConfig.category_id) == scope.category_id,
            subcategory_clause,
        )

    async def get(self, scope: SequenceScope) -> SequenceConfig | None:
        """Get the active config for a scope.

        A subcategory without its own config shares the category-wide counter.
        """
        config = await self._get_active(scope)
        if config is None and not scope.is_category_wide:
            config = await self._get_active(scope.category_wide())
            if config is not None:
                logger.debug(
                    "Using category-wide sequence config",
                    category_id=scope.category_id,
                    subcategory_id=scope.subcategory_id,
                    config_id=config.id,
                )
        return config

    async def _get_active(self, scope: SequenceScope) -> SequenceConfig | None:
        statement = self._scope_statement(scope).where(col(SequenceConfig.is_active).is_(True))
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def get_exact(self, scope: SequenceScope) -> SequenceConfig | None:
        """Get the config bound to exactly this scope, active or not."""
        result = await self.session.execute(self._scope_statement(scope))
        return result.scalars().first()

    async def get_by_id(self, config_id: str) -> SequenceConfig | None:
        return await self.session.get(SequenceConfig, config_id)

    async def list_all(self) -> list[SequenceConfig]:
        """List all configs, newest first."""
        statement = select(SequenceConfig).order_by(col(SequenceConfig.created_at).desc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def advance(self, config_id: str, new_current_sequence: int) -> SequenceConfig:
        """Set ``current_sequence`` and return the updated record. Flushes, does not commit."""
        config = await self.get_by_id(config_id)
        if config is None:
            raise ConfigNotFound()
        config.current_sequence = new_current_sequence
        config.updated_at = utc_now()
        await self.session.flush()
        return config

    async def reserve_next(self, config_id: str) -> int:
        """Atomically increment ``current_sequence`` and return the new value.

        Runs as a single ``UPDATE ... RETURNING``; the row stays locked until
        the surrounding transaction commits or rolls back, so concurrent
        allocators on the same config never receive the same number.
        """
        statement = (
            update(SequenceConfig)
            .where(col(SequenceConfig.id) == config_id)
            .values(
                current_sequence=col(SequenceConfig.current_sequence) + 1,
                updated_at=utc_now(),
            )
            .returning(col(SequenceConfig.current_sequence))
        )
        result = await self.session.execute(statement)
        value = result.scalar_one_or_none()
        if value is None:
            raise ConfigNotFound()
        return int(value)
