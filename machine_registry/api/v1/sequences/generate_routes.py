"""Identifier generation endpoint."""

from fastapi import APIRouter

from machine_registry.api.v1.dependencies import AllocatorDep
from machine_registry.api.v1.sequences.schemas import GenerateSequenceRequest, GenerateSequenceResponse
from machine_registry.services.sequences.scope import SequenceScope

router = APIRouter(tags=["sequences"])


@router.post("/sequences/generate", response_model=GenerateSequenceResponse, operation_id="generateSequence")
async def generate_sequence(
    body: GenerateSequenceRequest,
    allocator: AllocatorDep,
) -> GenerateSequenceResponse:
    """Allocate the next free identifier for a category/subcategory.

    The counter advance is committed; the identifier is not attached to any
    machine (use ``/machines/{id}/assign-sequence`` for that).
    """
    sequence = await allocator.generate(SequenceScope(body.category_id, body.subcategory_id))
    return GenerateSequenceResponse(sequence=sequence)
