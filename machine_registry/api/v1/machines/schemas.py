"""API schemas for machine endpoints."""

from datetime import datetime

from pydantic import BaseModel, field_serializer

from machine_registry.api.v1.types import UlidStr
from machine_registry.models.machine import Machine
from machine_registry.utils.datetime_utils import to_api_timezone


class MachineCreateRequest(BaseModel):
    """Create a machine.

    Either pass ``machine_sequence`` to use a manually chosen identifier or set
    ``generate_sequence`` to allocate one from the scope's sequence config.
    """

    category_id: UlidStr
    subcategory_id: UlidStr | None = None
    location: str
    machine_sequence: str | None = None
    generate_sequence: bool = False


class MachineResponse(BaseModel):
    id: str
    category_id: str
    subcategory_id: str | None
    machine_sequence: str | None
    location: str
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to API timezone."""
        return to_api_timezone(dt).isoformat()

    @classmethod
    def from_model(cls, machine: Machine) -> "MachineResponse":
        """Create response from Machine model."""
        return cls(
            id=machine.id,
            category_id=machine.category_id,
            subcategory_id=machine.subcategory_id,
            machine_sequence=machine.machine_sequence,
            location=machine.location,
            created_at=machine.created_at,
            updated_at=machine.updated_at,
        )
