"""Conversion of service exceptions to HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from machine_registry.services.exceptions import ConflictError, NotFoundError, ServiceError, ValidationError

logger = structlog.get_logger(__name__)

# Checked in order, first match wins
_STATUS_CODES: tuple[tuple[type[ServiceError], int], ...] = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
)


def status_code_for(exc: ServiceError) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def service_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a ServiceError as ``{"detail": ..., "code": ...}``."""
    assert isinstance(exc, ServiceError)
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "code": exc.code})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
