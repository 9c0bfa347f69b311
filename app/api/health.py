"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.api.productos import get_catalog_context
from app.application.context import CatalogContext
from app.infrastructure.config import get_settings

router = APIRouter()

SERVICE_NAME = "catalogo-productos"


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=get_settings().api_version,
    )


@router.get("/ready")
async def readiness_check(ctx: CatalogContext = Depends(get_catalog_context)) -> JSONResponse:
    """Check if the catalog store accepts requests.

    Returns:
        200 with "ready", or 503 when the store cannot be reached.
    """
    if await ctx.store.ping():
        return JSONResponse({"status": "ready", "store": ctx.settings.store_backend})
    return JSONResponse(
        {"status": "not_ready", "store": ctx.settings.store_backend},
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
