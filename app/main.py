"""Catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.health import router as health_router
from app.api.middleware import setup_middleware
from app.api.productos import router as productos_router
from app.application.context import get_context
from app.catalog.repository import SqlAlchemyCatalogStore
from app.infrastructure.config import get_settings
from app.infrastructure.log_config import configure_logging

logger = structlog.get_logger()

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging(settings.log_level, settings.log_json)
    logger.info(
        "Starting catalog API",
        version=settings.api_version,
        debug=settings.debug,
    )

    context = get_context()
    if isinstance(context.store, SqlAlchemyCatalogStore):
        await context.store.create_schema()

    yield

    logger.info("Shutting down catalog API")
    if isinstance(context.store, SqlAlchemyCatalogStore):
        await context.store.engine.dispose()


app = FastAPI(
    title="Catálogo de Productos API",
    description="Multi-tenant pharmacy product catalog",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

setup_middleware(app)

app.include_router(health_router, tags=["Health"])
app.include_router(productos_router)
