"""Catalog service for product operations.

High-level service that combines store operations with the catalog's
business rules: code generation, timestamps, search ranking and statistics.
"""

import unicodedata
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog

from app.catalog.models import Producto, format_timestamp, generate_codigo, next_modification_timestamp
from app.catalog.store import CatalogStore, Page, ProductFilter, QueryOptions
from app.catalog.taxonomy import Taxonomy
from app.catalog.validation import validate_create, validate_update
from app.domain.exceptions import ProductAlreadyExistsError, ProductNotFoundError

logger = structlog.get_logger()

SORT_OPTIONS = ("relevancia", "precio_asc", "precio_desc", "nombre")
DEFAULT_SORT = "relevancia"
CODE_ATTEMPTS = 3

# (field, points) for a term contained in the field
RELEVANCE_WEIGHTS = (
    ("nombre", 10),
    ("descripcion", 5),
    ("categoria", 3),
    ("subcategoria", 3),
    ("laboratorio", 2),
)
NAME_PREFIX_BONUS = 15

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current UTC instant."""
    return datetime.now(timezone.utc)


# ============================================================================
# Search ranking
# ============================================================================


def relevance_score(producto: Producto, termino: str) -> int:
    """Score how well a product matches a lower-case search term.

    Args:
        producto: Candidate product.
        termino: Trimmed, lower-cased term.

    Returns:
        Sum of the weights of the fields containing the term, plus a bonus
        when the name starts with it.
    """
    score = 0
    for field, points in RELEVANCE_WEIGHTS:
        value = getattr(producto, field) or ""
        if termino in value.lower():
            score += points
    if producto.nombre.lower().startswith(termino):
        score += NAME_PREFIX_BONUS
    return score


def collation_key(value: str) -> tuple[str, str]:
    """Sort key that ignores accents and case, ties broken by the raw value."""
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold(), value


@dataclass
class RankedProduct:
    """A search hit with its relevance score."""

    producto: Producto
    relevancia: int

    def to_dict(self) -> dict[str, Any]:
        return {**self.producto.to_dict(), "relevancia": self.relevancia}


def sort_ranked(results: list[RankedProduct], criterio: str) -> list[RankedProduct]:
    """Sort one page of search results.

    Args:
        results: Ranked products of the current page.
        criterio: One of SORT_OPTIONS; anything else sorts by relevance.

    Returns:
        New sorted list.
    """
    if criterio == "precio_asc":
        return sorted(results, key=lambda r: r.producto.precio)
    if criterio == "precio_desc":
        return sorted(results, key=lambda r: r.producto.precio, reverse=True)
    if criterio == "nombre":
        return sorted(results, key=lambda r: collation_key(r.producto.nombre))
    return sorted(results, key=lambda r: (-r.relevancia, r.producto.precio))


@dataclass
class SearchResult:
    """Ranked page of a term search."""

    termino: str
    criterio: str
    results: list[RankedProduct]
    last_key: dict[str, Any] | None

    @property
    def has_more(self) -> bool:
        return self.last_key is not None


# ============================================================================
# Service
# ============================================================================


class CatalogService:
    """Service for catalog operations of one tenant-aware store.

    Example usage:
        service = CatalogService(InMemoryCatalogStore(), Taxonomy())
        producto = await service.create_product("acme", payload)
        page = await service.list_products("acme", QueryOptions(limit=20))
    """

    def __init__(
        self,
        store: CatalogStore,
        taxonomy: Taxonomy,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize service.

        Args:
            store: Catalog store backend.
            taxonomy: Taxonomy used for validation.
            clock: Source of the current instant.
        """
        self.store = store
        self.taxonomy = taxonomy
        self.clock = clock

    async def create_product(self, tenant_id: str, body: dict[str, Any]) -> Producto:
        """Validate a payload and store a new product for a tenant.

        Args:
            tenant_id: Tenant of the authenticated caller.
            body: Decoded JSON payload.

        Returns:
            The stored product.

        Raises:
            ValidationError: If the payload is invalid.
            ProductAlreadyExistsError: If every generated code collided.
        """
        fields = validate_create(body, self.taxonomy)

        attempt = 1
        while True:
            now = self.clock()
            timestamp = format_timestamp(now)
            producto = Producto(
                tenant_id=tenant_id,
                codigo=generate_codigo(now),
                fecha_creacion=timestamp,
                fecha_modificacion=timestamp,
                **fields,
            )
            try:
                await self.store.put(producto, overwrite=False)
            except ProductAlreadyExistsError:
                logger.warning("Product code collision", codigo=producto.codigo, attempt=attempt)
                if attempt >= CODE_ATTEMPTS:
                    raise
                attempt += 1
                continue

            logger.info("Producto creado", tenant_id=tenant_id, codigo=producto.codigo)
            return producto

    async def get_product(self, tenant_id: str, codigo: str) -> Producto:
        """Get a product of a tenant.

        Raises:
            ProductNotFoundError: If the tenant has no product with that code.
        """
        producto = await self.store.get(tenant_id, codigo)
        if producto is None:
            raise ProductNotFoundError(codigo)
        return producto

    async def update_product(
        self,
        tenant_id: str,
        codigo: str,
        body: dict[str, Any],
    ) -> Producto:
        """Apply a partial update.

        Args:
            tenant_id: Tenant of the authenticated caller.
            codigo: Product code.
            body: Decoded JSON payload.

        Returns:
            Post-image of the product.

        Raises:
            ProductNotFoundError: If the product does not exist for the tenant.
            ValidationError: If the payload is invalid.
        """
        current = await self.get_product(tenant_id, codigo)
        patch = validate_update(body, current, self.taxonomy)
        patch["fecha_modificacion"] = next_modification_timestamp(
            current.fecha_modificacion, self.clock()
        )

        producto = await self.store.update(tenant_id, codigo, patch)
        logger.info(
            "Producto modificado",
            tenant_id=tenant_id,
            codigo=codigo,
            fields=sorted(k for k in patch if k != "fecha_modificacion"),
        )
        return producto

    async def delete_product(self, tenant_id: str, codigo: str) -> Producto:
        """Hard-delete a product and return its last image.

        Raises:
            ProductNotFoundError: If the product does not exist for the tenant.
        """
        await self.get_product(tenant_id, codigo)
        deleted = await self.store.delete(tenant_id, codigo)
        if deleted is None:
            # removed concurrently between the check and the delete
            raise ProductNotFoundError(codigo)

        logger.info("Producto eliminado", tenant_id=tenant_id, codigo=codigo)
        return deleted

    async def list_products(self, tenant_id: str, options: QueryOptions) -> Page:
        """Query a page of the tenant's products."""
        return await self.store.query(tenant_id, options)

    async def search_products(
        self,
        tenant_id: str,
        termino: str,
        limit: int,
        start_key: dict[str, Any] | None = None,
        criterio: str = DEFAULT_SORT,
    ) -> SearchResult:
        """Search active products by term and rank the returned page.

        Args:
            tenant_id: Tenant of the authenticated caller.
            termino: Trimmed, lower-cased search term.
            limit: Page size.
            start_key: Key to resume after.
            criterio: Sort criterion; unknown values mean relevance.

        Returns:
            Ranked, sorted page.
        """
        if criterio not in SORT_OPTIONS:
            criterio = DEFAULT_SORT

        page = await self.store.query(
            tenant_id,
            QueryOptions(
                limit=limit,
                start_key=start_key,
                ascending=criterio != "precio_desc",
                filter=ProductFilter(termino=termino, activo=True),
            ),
        )
        ranked = [RankedProduct(p, relevance_score(p, termino)) for p in page.items]
        return SearchResult(
            termino=termino,
            criterio=criterio,
            results=sort_ranked(ranked, criterio),
            last_key=page.last_key,
        )

    async def all_products(self, tenant_id: str) -> list[Producto]:
        """Read every product of a tenant, following pagination to the end."""
        items: list[Producto] = []
        start_key: dict[str, Any] | None = None
        while True:
            page = await self.store.query(tenant_id, QueryOptions(limit=None, start_key=start_key))
            items.extend(page.items)
            if not page.has_more:
                return items
            start_key = page.last_key

    async def statistics(self, tenant_id: str) -> dict[str, Any]:
        """Aggregate catalog statistics for a tenant.

        Returns:
            Totals, histograms by category and subcategory, laboratories,
            price range, prescription counts, total stock and the taxonomy.
        """
        productos = await self.all_products(tenant_id)

        por_categoria: dict[str, int] = {}
        por_subcategoria: dict[str, int] = {}
        laboratorios: set[str] = set()
        precios: list[float] = []
        con_receta = 0
        stock_total = 0

        for producto in productos:
            por_categoria[producto.categoria] = por_categoria.get(producto.categoria, 0) + 1
            if producto.subcategoria:
                por_subcategoria[producto.subcategoria] = (
                    por_subcategoria.get(producto.subcategoria, 0) + 1
                )
            if producto.laboratorio:
                laboratorios.add(producto.laboratorio)
            precios.append(producto.precio)
            if producto.requiere_receta:
                con_receta += 1
            stock_total += producto.stock_disponible

        return {
            "total_productos": len(productos),
            "por_categoria": por_categoria,
            "por_subcategoria": por_subcategoria,
            "laboratorios": sorted(laboratorios),
            "rango_precios": {
                "min": min(precios) if precios else None,
                "max": max(precios) if precios else None,
                "promedio": sum(precios) / len(precios) if precios else None,
            },
            "con_receta": con_receta,
            "sin_receta": len(productos) - con_receta,
            "stock_total": stock_total,
            "categorias_disponibles": self.taxonomy.as_dict(),
        }
