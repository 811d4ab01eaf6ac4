"""Machine API endpoints."""

from fastapi import APIRouter, Response, status

from machine_registry.api.v1.dependencies import AllocatorDep, MachineServiceDep
from machine_registry.api.v1.machines.schemas import MachineCreateRequest, MachineResponse
from machine_registry.api.v1.types import UlidStr
from machine_registry.services.exceptions import ValidationError

router = APIRouter(tags=["machines"])


@router.post(
    "/machines",
    response_model=MachineResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createMachine",
)
async def create_machine(
    body: MachineCreateRequest,
    service: MachineServiceDep,
    allocator: AllocatorDep,
) -> MachineResponse:
    if body.machine_sequence and body.generate_sequence:
        raise ValidationError("Pass either machine_sequence or generate_sequence, not both")

    machine = await service.create_machine(
        category_id=body.category_id,
        subcategory_id=body.subcategory_id,
        location=body.location,
        machine_sequence=body.machine_sequence,
    )
    if body.generate_sequence:
        machine = await service.assign_sequence(machine.id, allocator)
    return MachineResponse.from_model(machine)


@router.get("/machines/{machine_id}", response_model=MachineResponse, operation_id="getMachine")
async def get_machine(machine_id: UlidStr, service: MachineServiceDep) -> MachineResponse:
    machine = await service.get_machine(machine_id)
    return MachineResponse.from_model(machine)


@router.post(
    "/machines/{machine_id}/assign-sequence",
    response_model=MachineResponse,
    operation_id="assignMachineSequence",
)
async def assign_machine_sequence(
    machine_id: UlidStr,
    service: MachineServiceDep,
    allocator: AllocatorDep,
) -> MachineResponse:
    """Allocate a new identifier for the machine's scope and store it on the machine."""
    machine = await service.assign_sequence(machine_id, allocator)
    return MachineResponse.from_model(machine)


@router.delete("/machines/{machine_id}", status_code=status.HTTP_204_NO_CONTENT, operation_id="deleteMachine")
async def delete_machine(machine_id: UlidStr, service: MachineServiceDep) -> Response:
    """Soft-delete a machine; its identifier becomes available again."""
    await service.soft_delete(machine_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
