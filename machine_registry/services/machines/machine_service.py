"""Machine service.

Besides minimal machine CRUD, this is the collaborator the sequence engine
reads from and writes to:
- identifier_exists: uniqueness check among live (not soft-deleted) machines
- list_by_scope: machines affected by a template change
- set_identifier: write back a regenerated identifier
"""

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from machine_registry.models.base import utc_now
from machine_registry.models.machine import Machine
from machine_registry.services.machines.exceptions import IdentifierConflict, MachineNotFound
from machine_registry.services.sequences.scope import SequenceScope

if TYPE_CHECKING:
    from machine_registry.services.sequences.allocator import SequenceAllocator

logger = structlog.get_logger(__name__)


class MachineService:
    """Service for machine records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_machine(self, machine_id: str) -> Machine:
        """Get a live machine by id."""
        machine = await self.session.get(Machine, machine_id)
        if machine is None or machine.deleted_at is not None:
            raise MachineNotFound()
        return machine

    async def create_machine(
        self,
        *,
        category_id: str,
        location: str,
        subcategory_id: str | None = None,
        machine_sequence: str | None = None,
    ) -> Machine:
        """Create a machine, optionally with a manually chosen identifier."""
        if machine_sequence:
            machine_sequence = machine_sequence.strip()
            if await self.identifier_exists(machine_sequence):
                raise IdentifierConflict()

        machine = Machine(
            category_id=category_id,
            subcategory_id=subcategory_id or None,
            location=location,
            machine_sequence=machine_sequence or None,
        )
        self.session.add(machine)
        await self.session.commit()

        logger.info("Created machine", machine_id=machine.id, machine_sequence=machine.machine_sequence)
        return machine

    async def soft_delete(self, machine_id: str) -> None:
        """Mark machine as deleted; its identifier becomes free for reuse."""
        machine = await self.get_machine(machine_id)
        machine.deleted_at = utc_now()
        await self.session.commit()
        logger.info("Deleted machine", machine_id=machine_id, machine_sequence=machine.machine_sequence)

    async def identifier_exists(self, identifier: str, *, exclude_machine_id: str | None = None) -> bool:
        """Check whether a live machine already uses ``identifier``."""
        statement = (
            select(func.count())
            .select_from(Machine)
            .where(
                col(Machine.machine_sequence) == identifier.strip(),
                col(Machine.deleted_at).is_(None),
            )
        )
        if exclude_machine_id is not None:
            statement = statement.where(col(Machine.id) != exclude_machine_id)
        result = await self.session.execute(statement)
        return (result.scalar() or 0) > 0

    async def list_by_scope(self, category_id: str, subcategory_id: str | None) -> list[Machine]:
        """List live machines of exactly this scope.

        A ``None`` subcategory matches only machines without a subcategory.
        """
        subcategory_clause = (
            col(Machine.subcategory_id).is_(None)
            if subcategory_id is None
            else col(Machine.subcategory_id) == subcategory_id
        )
        statement = (
            select(Machine)
            .where(
                col(Machine.category_id) == category_id,
                subcategory_clause,
                col(Machine.deleted_at).is_(None),
            )
            .order_by(col(Machine.created_at), col(Machine.id))
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def set_identifier(self, machine_id: str, identifier: str) -> Machine:
        """Set a machine's identifier. Flushes but does not commit.

        Raises:
            MachineNotFound: If the machine does not exist or is deleted.
            IdentifierConflict: If another live machine holds the identifier.
        """
        machine = await self.get_machine(machine_id)
        if await self.identifier_exists(identifier, exclude_machine_id=machine_id):
            raise IdentifierConflict(f"Machine sequence {identifier} is already assigned to another machine")

        machine.machine_sequence = identifier
        machine.updated_at = utc_now()
        await self.session.flush()
        return machine

    async def assign_sequence(self, machine_id: str, allocator: "SequenceAllocator") -> Machine:
        """Generate an identifier for the machine's scope and store it.

        The counter advance and the machine update commit together.
        """
        machine = await self.get_machine(machine_id)
        scope = SequenceScope(machine.category_id, machine.subcategory_id)
        try:
            identifier = await allocator.generate(scope, commit=False)
            await self.set_identifier(machine.id, identifier)
            await self.session.commit()
        except BaseException:
            await self.session.rollback()
            raise

        logger.info("Assigned machine sequence", machine_id=machine.id, machine_sequence=identifier)
        return machine
