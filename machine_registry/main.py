"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from machine_registry.api.errors import register_exception_handlers
from machine_registry.api.v1 import health, machines, sequences
from machine_registry.config import settings
from machine_registry.db import dispose_engine
from machine_registry.logging import setup_logging

# Configure logging before anything else
setup_logging()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting Machine Registry API", debug=settings.debug)

    yield

    logger.info("Shutting down Machine Registry API")
    await dispose_engine()
    logger.info("Database connections disposed")


app = FastAPI(
    title="Machine Registry API",
    description="Machine tracking with category-scoped sequence identifiers",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# API routes
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(sequences.router, prefix="/api/v1")
app.include_router(machines.router, prefix="/api/v1")
