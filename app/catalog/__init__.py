"""Product Catalog Service.

Provides the pharmacy taxonomy, product model and validation, the store
backends and the catalog operations built on them.
"""

from app.catalog.memory import InMemoryCatalogStore
from app.catalog.models import Producto, generate_codigo
from app.catalog.repository import SqlAlchemyCatalogStore
from app.catalog.service import CatalogService, RankedProduct, SearchResult
from app.catalog.store import (
    CatalogStore,
    Page,
    ProductFilter,
    QueryOptions,
    decode_cursor,
    encode_cursor,
)
from app.catalog.taxonomy import CATEGORIAS_DISPONIBLES, Taxonomy

__all__ = [
    # Taxonomy
    "CATEGORIAS_DISPONIBLES",
    "Taxonomy",
    # Models
    "Producto",
    "generate_codigo",
    # Stores
    "CatalogStore",
    "InMemoryCatalogStore",
    "SqlAlchemyCatalogStore",
    "Page",
    "ProductFilter",
    "QueryOptions",
    "decode_cursor",
    "encode_cursor",
    # Service
    "CatalogService",
    "RankedProduct",
    "SearchResult",
]
