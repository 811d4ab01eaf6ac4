"""Base service exceptions.

These exceptions are raised by the service layer and should be caught
by the API layer and converted to appropriate HTTP responses.
"""


class ServiceError(Exception):
    """Base service exception.

    Subclasses define a stable ``code`` and a default ``message`` so the API
    layer can map them to responses without inspecting the message text.
    """

    code: str = "SERVICE_ERROR"
    message: str = "Service error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class NotFoundError(ServiceError):
    """Resource not found."""

    code = "NOT_FOUND"
    message = "Resource not found"


class ValidationError(ServiceError):
    """Validation error."""

    code = "VALIDATION_ERROR"
    message = "Validation error"


class ConflictError(ServiceError):
    """Resource conflicts with existing data."""

    code = "CONFLICT"
    message = "Resource already exists"
