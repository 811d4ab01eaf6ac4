"""Allocation of unique machine identifiers."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from machine_registry.config import settings
from machine_registry.models.sequence_config import SequenceConfig
from machine_registry.services.categories.category_service import CategoryService
from machine_registry.services.machines.machine_service import MachineService
from machine_registry.services.sequences.counter_store import SequenceCounterStore
from machine_registry.services.sequences.exceptions import ConfigNotFound, GenerationExhausted
from machine_registry.services.sequences.scope import ScopeSlugs, SequenceScope, resolve_scope_slugs
from machine_registry.services.sequences.template import encode

logger = structlog.get_logger(__name__)


class SequenceAllocator:
    """Issues the next free identifier for a scope.

    Numbers are reserved with an atomic increment on the counter row, and
    each reserved number is checked against live machines. A collision
    (possible only with manually entered identifiers) moves on to the next
    reserved number, so the counter always ends at the number actually issued.

    Everything happens in one transaction: if allocation fails or the
    request is cancelled, the transaction is rolled back and the counter is
    left untouched.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        counter_store: SequenceCounterStore | None = None,
        machines: MachineService | None = None,
        categories: CategoryService | None = None,
        max_attempts: int | None = None,
    ):
        self.session = session
        self.counter_store = counter_store or SequenceCounterStore(session)
        self.machines = machines or MachineService(session)
        self.categories = categories or CategoryService(session)
        self.max_attempts = max_attempts or settings.sequence_max_attempts

    async def generate(self, scope: SequenceScope, *, commit: bool = True) -> str:
        """Generate the next unique identifier for ``scope`` and advance its counter.

        Args:
            scope: Category/subcategory to allocate in. Falls back to the
                category-wide config when the subcategory has none.
            commit: Commit the counter advance. Pass False to let the caller
                commit it together with its own writes (and roll back on error).

        Raises:
            ConfigNotFound: No active config for the scope or its category.
            ReferenceNotFound: Category or subcategory no longer exists.
            GenerationExhausted: No free identifier within ``max_attempts``.
        """
        config = await self.counter_store.get(scope)
        if config is None:
            raise ConfigNotFound()

        slugs = await resolve_scope_slugs(self.categories, scope)

        if not commit:
            return await self._allocate(config, slugs)

        try:
            identifier = await self._allocate(config, slugs)
            await self.session.commit()
        except BaseException:
            # Includes CancelledError: never leave the counter half-advanced
            await self.session.rollback()
            raise

        logger.info(
            "Generated machine sequence",
            config_id=config.id,
            category_id=scope.category_id,
            subcategory_id=scope.subcategory_id,
            machine_sequence=identifier,
        )
        return identifier

    async def _allocate(self, config: SequenceConfig, slugs: ScopeSlugs) -> str:
        for attempt in range(1, self.max_attempts + 1):
            number = await self.counter_store.reserve_next(config.id)
            identifier = encode(config.template, slugs.category, slugs.subcategory, number)
            if not await self.machines.identifier_exists(identifier):
                return identifier

            logger.warning(
                "Machine sequence already taken, trying next number",
                config_id=config.id,
                machine_sequence=identifier,
                attempt=attempt,
            )

        logger.error(
            "Failed to generate unique machine sequence",
            config_id=config.id,
            attempts=self.max_attempts,
        )
        raise GenerationExhausted(config_id=config.id, attempts=self.max_attempts)
