"""Catalog store contract.

The store is a partitioned key-value table: tenant_id is the partition key
and codigo the sort key. Queries never leave the caller's partition; they walk
it in code order, apply an optional filter and stop after `limit` matches,
returning the key of the last item as a continuation point.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Protocol

from app.catalog.models import Producto
from app.domain.exceptions import InvalidCursorError


@dataclass
class ProductFilter:
    """Server-side predicate for a partition query. All set fields are ANDed.

    Attributes:
        categoria: Exact category.
        subcategoria: Exact subcategory.
        laboratorio: Substring of laboratorio (case-sensitive).
        requiere_receta: Exact prescription flag.
        precio_min: Inclusive lower price bound.
        precio_max: Inclusive upper price bound.
        search: Substring of nombre or descripcion (case-sensitive).
        termino: Lower-case term matched case-insensitively against nombre,
            descripcion, categoria, subcategoria or laboratorio.
        activo: Exact active flag.
    """

    categoria: str | None = None
    subcategoria: str | None = None
    laboratorio: str | None = None
    requiere_receta: bool | None = None
    precio_min: float | None = None
    precio_max: float | None = None
    search: str | None = None
    termino: str | None = None
    activo: bool | None = None


@dataclass
class QueryOptions:
    """Options for a partition query.

    Attributes:
        limit: Maximum number of items returned; None returns every match.
        start_key: Exclusive start key from a previous page.
        ascending: Walk codes upwards; the default walks newest first.
        filter: Predicate applied before the limit.
    """

    limit: int | None = 20
    start_key: dict[str, Any] | None = None
    ascending: bool = False
    filter: ProductFilter = field(default_factory=ProductFilter)


@dataclass
class Page:
    """One page of query results."""

    items: list[Producto]
    last_key: dict[str, Any] | None = None

    @property
    def has_more(self) -> bool:
        """Whether the store reported more matching items."""
        return self.last_key is not None


class CatalogStore(Protocol):
    """Semantic operations over the products table."""

    async def get(self, tenant_id: str, codigo: str) -> Producto | None:
        """Point lookup."""
        ...

    async def put(self, producto: Producto, *, overwrite: bool = True) -> None:
        """Write a whole item.

        Raises:
            ProductAlreadyExistsError: If overwrite is False and the key exists.
        """
        ...

    async def update(self, tenant_id: str, codigo: str, patch: dict[str, Any]) -> Producto:
        """Apply a field → value patch and return the post-image.

        Raises:
            ProductNotFoundError: If the item does not exist.
        """
        ...

    async def delete(self, tenant_id: str, codigo: str) -> Producto | None:
        """Remove an item and return its old image."""
        ...

    async def query(self, tenant_id: str, options: QueryOptions) -> Page:
        """Query one partition."""
        ...

    async def ping(self) -> bool:
        """Check that the backend is reachable."""
        ...


# ============================================================================
# Cursor codec
# ============================================================================


def encode_cursor(key: dict[str, Any] | None) -> str | None:
    """Encode a last-evaluated key as base64(JSON) for clients.

    Args:
        key: Store key, or None at the end of the partition.

    Returns:
        Opaque cursor, or None.
    """
    if key is None:
        return None
    raw = json.dumps(key, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_cursor(token: str | None) -> dict[str, Any] | None:
    """Decode a cursor produced by encode_cursor.

    Args:
        token: Cursor from the client, or None/"" for the first page.

    Returns:
        Store key, or None.

    Raises:
        InvalidCursorError: If the token is not base64 JSON of a key object.
    """
    if not token:
        return None
    # unencoded "+" arrives as a space after query-string decoding
    token = token.strip().replace(" ", "+")
    try:
        raw = base64.b64decode(token, validate=True)
        key = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise InvalidCursorError() from e

    if not isinstance(key, dict) or not isinstance(key.get("codigo"), str):
        raise InvalidCursorError()
    return key
