"""Machine API package."""

from machine_registry.api.v1.machines.routes import router

__all__ = ["router"]
