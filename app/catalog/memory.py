"""In-memory catalog store.

Keeps items in a dict keyed by (tenant_id, codigo) with the same query
semantics as the SQL store. Used with STORE_BACKEND=memory and by the tests.
"""

from typing import Any

from app.catalog.models import Producto
from app.catalog.store import Page, ProductFilter, QueryOptions
from app.domain.exceptions import ProductAlreadyExistsError, ProductNotFoundError


def _contains(value: str | None, needle: str) -> bool:
    return value is not None and needle in value


def matches(producto: Producto, filters: ProductFilter) -> bool:
    """Evaluate a filter against one product.

    Args:
        producto: Candidate product.
        filters: Predicate; unset fields are ignored.

    Returns:
        True if every set field matches.
    """
    if filters.categoria is not None and producto.categoria != filters.categoria:
        return False
    if filters.subcategoria is not None and producto.subcategoria != filters.subcategoria:
        return False
    if filters.laboratorio is not None and not _contains(producto.laboratorio, filters.laboratorio):
        return False
    if filters.requiere_receta is not None and producto.requiere_receta != filters.requiere_receta:
        return False
    if filters.precio_min is not None and producto.precio < filters.precio_min:
        return False
    if filters.precio_max is not None and producto.precio > filters.precio_max:
        return False
    if filters.search is not None and not (
        _contains(producto.nombre, filters.search)
        or _contains(producto.descripcion, filters.search)
    ):
        return False
    if filters.termino is not None:
        termino = filters.termino.lower()
        fields = (
            producto.nombre,
            producto.descripcion,
            producto.categoria,
            producto.subcategoria,
            producto.laboratorio,
        )
        if not any(_contains(value.lower() if value else None, termino) for value in fields):
            return False
    if filters.activo is not None and producto.activo != filters.activo:
        return False
    return True


class InMemoryCatalogStore:
    """Dict-backed implementation of CatalogStore."""

    def __init__(self, items: list[Producto] | None = None) -> None:
        """Initialize store.

        Args:
            items: Optional products to preload.
        """
        self._items: dict[tuple[str, str], dict[str, Any]] = {}
        for producto in items or []:
            self._items[(producto.tenant_id, producto.codigo)] = producto.to_dict()

    def __len__(self) -> int:
        return len(self._items)

    async def get(self, tenant_id: str, codigo: str) -> Producto | None:
        item = self._items.get((tenant_id, codigo))
        return Producto.model_validate(item) if item is not None else None

    async def put(self, producto: Producto, *, overwrite: bool = True) -> None:
        key = (producto.tenant_id, producto.codigo)
        if not overwrite and key in self._items:
            raise ProductAlreadyExistsError(producto.tenant_id, producto.codigo)
        self._items[key] = producto.to_dict()

    async def update(self, tenant_id: str, codigo: str, patch: dict[str, Any]) -> Producto:
        key = (tenant_id, codigo)
        if key not in self._items:
            raise ProductNotFoundError(codigo)

        fields = {k: v for k, v in patch.items() if k not in ("tenant_id", "codigo")}
        updated = Producto.model_validate({**self._items[key], **fields})
        self._items[key] = updated.to_dict()
        return updated

    async def delete(self, tenant_id: str, codigo: str) -> Producto | None:
        item = self._items.pop((tenant_id, codigo), None)
        return Producto.model_validate(item) if item is not None else None

    async def query(self, tenant_id: str, options: QueryOptions) -> Page:
        codes = sorted(
            (codigo for tenant, codigo in self._items if tenant == tenant_id),
            reverse=not options.ascending,
        )

        if options.start_key is not None:
            start = options.start_key["codigo"]
            if options.ascending:
                codes = [c for c in codes if c > start]
            else:
                codes = [c for c in codes if c < start]

        items: list[Producto] = []
        has_more = False
        for codigo in codes:
            producto = Producto.model_validate(self._items[(tenant_id, codigo)])
            if not matches(producto, options.filter):
                continue
            if options.limit is not None and len(items) >= options.limit:
                has_more = True
                break
            items.append(producto)

        last_key = items[-1].key if has_more and items else None
        return Page(items=items, last_key=last_key)

    async def ping(self) -> bool:
        return True
