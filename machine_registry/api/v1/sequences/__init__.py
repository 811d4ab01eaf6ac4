"""Sequence API package.

- config_routes: sequence config CRUD, reset and reformat preview
- generate_routes: identifier generation
"""

from fastapi import APIRouter

from machine_registry.api.v1.sequences.config_routes import router as config_router
from machine_registry.api.v1.sequences.generate_routes import router as generate_router

router = APIRouter()
router.include_router(config_router)
router.include_router(generate_router)

__all__ = ["router"]
