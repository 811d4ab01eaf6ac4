"""Machine domain exceptions."""

from machine_registry.services.exceptions import ConflictError, NotFoundError


class MachineNotFound(NotFoundError):
    """Machine not found (or soft-deleted)."""

    code = "MACHINE_NOT_FOUND"
    message = "Machine not found"


class IdentifierConflict(ConflictError):
    """Another live machine already holds the identifier."""

    code = "MACHINE_SEQUENCE_CONFLICT"
    message = "Machine sequence is already assigned to another machine"
