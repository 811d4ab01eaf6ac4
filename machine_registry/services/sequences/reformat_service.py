"""Re-rendering of existing machine identifiers after a template change.

For every live machine in a config's scope the number is recovered from its
current identifier using the *old* template and rendered again with the
*new* one. Only identifiers that actually change are written.

This is a bulk, non-transactional operation: each machine is written in its
own savepoint, so one failed write does not undo the others. Re-running it
with the same templates is a no-op for machines already migrated.
"""

from dataclasses import dataclass, field
from enum import StrEnum

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from machine_registry.models.machine import Machine
from machine_registry.models.sequence_config import SequenceConfig
from machine_registry.services.categories.category_service import CategoryService
from machine_registry.services.exceptions import ServiceError
from machine_registry.services.machines.machine_service import MachineService
from machine_registry.services.sequences.scope import ScopeSlugs, SequenceScope, resolve_scope_slugs
from machine_registry.services.sequences.template import (
    DecodeStrategy,
    decode,
    encode,
    match_rendered,
    validate_template,
)

logger = structlog.get_logger(__name__)


class ReformatOutcome(StrEnum):
    """What happened to a single machine during reformatting."""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    UNDECODABLE = "undecodable"
    FAILED = "failed"


@dataclass
class ReformatItem:
    """Reformat result for one machine."""

    machine_id: str
    old_identifier: str
    outcome: ReformatOutcome
    new_identifier: str | None = None
    number: int | None = None
    strategy: DecodeStrategy | None = None
    reason: str | None = None


@dataclass
class ReformatReport:
    """Result of reformatting all machines of a config's scope."""

    config_id: str
    old_template: str
    new_template: str
    dry_run: bool = False
    items: list[ReformatItem] = field(default_factory=list)

    def _count(self, outcome: ReformatOutcome) -> int:
        return sum(1 for item in self.items if item.outcome is outcome)

    @property
    def updated(self) -> int:
        return self._count(ReformatOutcome.UPDATED)

    @property
    def unchanged(self) -> int:
        return self._count(ReformatOutcome.UNCHANGED)

    @property
    def undecodable(self) -> int:
        return self._count(ReformatOutcome.UNDECODABLE)

    @property
    def failed(self) -> int:
        return self._count(ReformatOutcome.FAILED)

    @property
    def total(self) -> int:
        return len(self.items)


class ReformatService:
    """Rewrites machine identifiers of one scope from an old template to a new one."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        machines: MachineService | None = None,
        categories: CategoryService | None = None,
    ):
        self.session = session
        self.machines = machines or MachineService(session)
        self.categories = categories or CategoryService(session)

    async def reformat(
        self,
        config: SequenceConfig,
        old_template: str,
        new_template: str | None = None,
        *,
        dry_run: bool = False,
    ) -> ReformatReport:
        """Reformat identifiers of all live machines in the config's exact scope.

        Args:
            config: Config whose scope is migrated.
            old_template: Template the existing identifiers were rendered with.
            new_template: Target template, defaults to the config's current one.
            dry_run: Compute the report without writing anything (preview).

        Raises:
            InvalidTemplate: If the new template is invalid. An invalid old
                template only disables structural decoding.
            ReferenceNotFound: If the scope's category no longer exists.
        """
        new_template = validate_template(new_template or config.template)
        scope = SequenceScope(config.category_id, config.subcategory_id)
        slugs = await resolve_scope_slugs(self.categories, scope)

        machines = [
            machine
            for machine in await self.machines.list_by_scope(scope.category_id, scope.subcategory_id)
            if machine.machine_sequence
        ]

        report = ReformatReport(
            config_id=config.id,
            old_template=old_template,
            new_template=new_template,
            dry_run=dry_run,
        )
        report.items = [self._plan(machine, old_template, new_template, slugs) for machine in machines]

        if not dry_run:
            for item in report.items:
                if item.outcome is ReformatOutcome.UPDATED:
                    await self._apply(item)
            await self.session.commit()

        logger.info(
            "Reformatted machine sequences",
            config_id=config.id,
            old_template=old_template,
            new_template=new_template,
            dry_run=dry_run,
            updated=report.updated,
            unchanged=report.unchanged,
            undecodable=report.undecodable,
            failed=report.failed,
        )
        return report

    def _plan(self, machine: Machine, old_template: str, new_template: str, slugs: ScopeSlugs) -> ReformatItem:
        """Decide the new identifier for a machine without writing it."""
        old_identifier = machine.machine_sequence or ""
        # Already in the new format; decoding it with the old template could pick
        # up digits from the slugs instead of the sequence
        current = match_rendered(old_identifier, new_template, slugs.category, slugs.subcategory)
        if current is not None:
            return ReformatItem(
                machine_id=machine.id,
                old_identifier=old_identifier,
                new_identifier=old_identifier,
                number=current,
                strategy=DecodeStrategy.STRUCTURAL,
                outcome=ReformatOutcome.UNCHANGED,
            )

        decoded = decode(old_identifier, old_template, slugs.category, slugs.subcategory)
        if decoded is None:
            logger.warning("Could not decode machine sequence", machine_id=machine.id, machine_sequence=old_identifier)
            return ReformatItem(
                machine_id=machine.id,
                old_identifier=old_identifier,
                outcome=ReformatOutcome.UNDECODABLE,
                reason="No sequence number found in identifier",
            )

        new_identifier = encode(new_template, slugs.category, slugs.subcategory, decoded.number)
        outcome = ReformatOutcome.UNCHANGED if new_identifier == old_identifier else ReformatOutcome.UPDATED
        return ReformatItem(
            machine_id=machine.id,
            old_identifier=old_identifier,
            new_identifier=new_identifier,
            number=decoded.number,
            strategy=decoded.strategy,
            outcome=outcome,
        )

    async def _apply(self, item: ReformatItem) -> None:
        assert item.new_identifier is not None
        try:
            async with self.session.begin_nested():
                await self.machines.set_identifier(item.machine_id, item.new_identifier)
        except (ServiceError, SQLAlchemyError) as e:
            item.outcome = ReformatOutcome.FAILED
            item.reason = str(e)
            logger.warning(
                "Failed to update machine sequence",
                machine_id=item.machine_id,
                old_identifier=item.old_identifier,
                new_identifier=item.new_identifier,
                error=str(e),
            )
