"""API layer module.

Contains the FastAPI routers, the catalog handlers and their request and
response helpers.
"""

from app.api.health import router as health_router
from app.api.productos import router as productos_router

__all__ = [
    "health_router",
    "productos_router",
]
