"""FastAPI dependencies for service injection."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from machine_registry.db import get_session
from machine_registry.services.machines.machine_service import MachineService
from machine_registry.services.sequences.allocator import SequenceAllocator
from machine_registry.services.sequences.config_service import SequenceConfigService
from machine_registry.services.sequences.reformat_service import ReformatService

SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_config_service(session: SessionDep) -> SequenceConfigService:
    """Get a SequenceConfigService instance with the current session."""
    return SequenceConfigService(session)


async def get_allocator(session: SessionDep) -> SequenceAllocator:
    """Get a SequenceAllocator instance with the current session."""
    return SequenceAllocator(session)


async def get_reformat_service(session: SessionDep) -> ReformatService:
    """Get a ReformatService instance with the current session."""
    return ReformatService(session)


async def get_machine_service(session: SessionDep) -> MachineService:
    """Get a MachineService instance with the current session."""
    return MachineService(session)


# Type aliases for cleaner endpoint signatures
ConfigServiceDep = Annotated[SequenceConfigService, Depends(get_config_service)]
AllocatorDep = Annotated[SequenceAllocator, Depends(get_allocator)]
ReformatServiceDep = Annotated[ReformatService, Depends(get_reformat_service)]
MachineServiceDep = Annotated[MachineService, Depends(get_machine_service)]
