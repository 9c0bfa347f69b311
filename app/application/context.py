"""Catalog handler context.

Everything a handler needs besides the request itself: settings, the store
backend, the taxonomy and a clock. It is built once per process and passed to
every handler call, so tests can swap any part of it.
"""

from dataclasses import dataclass, field

import structlog

from app.catalog.memory import InMemoryCatalogStore
from app.catalog.repository import SqlAlchemyCatalogStore
from app.catalog.service import CatalogService, Clock, utc_now
from app.catalog.store import CatalogStore
from app.catalog.taxonomy import Taxonomy
from app.infrastructure.config import Settings, get_settings
from app.infrastructure.database import get_engine

logger = structlog.get_logger()

STORE_BACKENDS = ("sqlalchemy", "memory")


@dataclass
class CatalogContext:
    """Dependencies shared by the catalog handlers.

    Attributes:
        settings: Application settings.
        store: Catalog store backend.
        taxonomy: Product taxonomy.
        clock: Source of the current instant.
    """

    settings: Settings
    store: CatalogStore
    taxonomy: Taxonomy = field(default_factory=Taxonomy)
    clock: Clock = utc_now

    @property
    def service(self) -> CatalogService:
        """Catalog service over this context's store."""
        return CatalogService(self.store, self.taxonomy, self.clock)


def build_store(settings: Settings) -> CatalogStore:
    """Create the store backend selected by STORE_BACKEND.

    Args:
        settings: Application settings.

    Returns:
        Store instance.

    Raises:
        ValueError: If the backend name is unknown.
    """
    backend = settings.store_backend.lower()
    if backend == "memory":
        return InMemoryCatalogStore()
    if backend == "sqlalchemy":
        return SqlAlchemyCatalogStore(get_engine(settings.database_url), settings.table_name)
    raise ValueError(
        f"Unknown store backend '{settings.store_backend}', expected one of {STORE_BACKENDS}"
    )


def build_context(settings: Settings | None = None) -> CatalogContext:
    """Build a handler context from settings.

    Args:
        settings: Settings to use. Defaults to the environment.

    Returns:
        New CatalogContext.
    """
    settings = settings or get_settings()
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is empty, every token will be rejected")

    store = build_store(settings)
    logger.info(
        "Catalog context ready",
        store_backend=settings.store_backend,
        table=settings.table_name,
    )
    return CatalogContext(settings=settings, store=store)


_context: CatalogContext | None = None


def get_context() -> CatalogContext:
    """Get the process-wide handler context, building it on first use."""
    global _context
    if _context is None:
        _context = build_context()
    return _context


def set_context(context: CatalogContext | None) -> None:
    """Replace the process-wide handler context (None resets it)."""
    global _context
    _context = context
