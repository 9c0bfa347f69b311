"""Product payload validation.

Create and update payloads arrive as loosely typed JSON: prices may be
strings, flags may be "true"/"false". These functions coerce what the
storefront sends and reject anything that would break a catalog invariant,
raising ValidationError with the message shown to the user.
"""

import math
import re
from typing import Any

from app.catalog.models import Producto
from app.catalog.taxonomy import Taxonomy
from app.domain.exceptions import ValidationError

REQUIRED_FIELDS = ("nombre", "precio", "descripcion", "categoria", "laboratorio", "presentacion")
TEXT_FIELDS = ("nombre", "descripcion", "laboratorio", "presentacion")
UPDATABLE_FIELDS = (
    "nombre",
    "precio",
    "descripcion",
    "categoria",
    "subcategoria",
    "stock_disponible",
    "requiere_receta",
    "laboratorio",
    "presentacion",
    "imagen_url",
    "activo",
)

PRECIO_ERROR = "Precio debe ser un número mayor a 0"
STOCK_ERROR = "Stock disponible debe ser un número mayor o igual a 0"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_FALSE_STRINGS = {"", "false", "0", "no", "off", "null", "none"}


# ============================================================================
# Coercion helpers
# ============================================================================


def parse_float(value: Any) -> float | None:
    """Parse a real number from a JSON value.

    Args:
        value: Number or numeric string.

    Returns:
        The finite float, or None if it cannot be parsed.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_int(value: Any) -> int | None:
    """Parse an integer the way the storefront expects ("12.7" and 12.7 are 12).

    Args:
        value: Number or numeric string.

    Returns:
        The integer, or None if it cannot be parsed.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def coerce_bool(value: Any) -> bool:
    """Coerce a JSON value to a boolean.

    Strings such as "false", "0" or "no" are false; other values follow
    Python truthiness.
    """
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_text(field: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} debe ser texto")
    cleaned = value.strip()
    if not cleaned:
        raise ValidationError(f"{field} no puede estar vacío")
    return cleaned


def _clean_precio(value: Any) -> float:
    precio = parse_float(value)
    if precio is None or precio <= 0:
        raise ValidationError(PRECIO_ERROR)
    return precio


def _clean_stock(value: Any) -> int:
    stock = parse_int(value)
    if stock is None or stock < 0:
        raise ValidationError(STOCK_ERROR)
    return stock


def _clean_subcategoria(value: Any) -> str | None:
    if _is_blank(value):
        return None
    if not isinstance(value, str):
        raise ValidationError("subcategoria debe ser texto")
    return value.strip()


# ============================================================================
# Validators
# ============================================================================


def validate_create(body: dict[str, Any], taxonomy: Taxonomy) -> dict[str, Any]:
    """Validate a create payload.

    Args:
        body: Decoded JSON body.
        taxonomy: Taxonomy the category must belong to.

    Returns:
        Clean product fields (everything except key and timestamps).

    Raises:
        ValidationError: On the first rule violated.
    """
    for field in REQUIRED_FIELDS:
        if _is_blank(body.get(field)):
            raise ValidationError(f"Campo requerido: {field}")

    precio = _clean_precio(body["precio"])

    stock_value = body.get("stock_disponible")
    stock = 0 if _is_blank(stock_value) else _clean_stock(stock_value)

    fields: dict[str, Any] = {field: _clean_text(field, body[field]) for field in TEXT_FIELDS}
    categoria = _clean_text("categoria", body["categoria"])
    subcategoria = _clean_subcategoria(body.get("subcategoria"))
    taxonomy.validate(categoria, subcategoria)

    imagen_url = body.get("imagen_url")

    fields.update(
        precio=precio,
        categoria=categoria,
        subcategoria=subcategoria,
        stock_disponible=stock,
        requiere_receta=coerce_bool(body.get("requiere_receta", False)),
        imagen_url=str(imagen_url) if imagen_url is not None else "",
        activo=True,
    )
    return fields


def validate_update(
    body: dict[str, Any],
    current: Producto,
    taxonomy: Taxonomy,
) -> dict[str, Any]:
    """Validate an update payload against the stored product.

    Only fields in UPDATABLE_FIELDS that are present in the body are
    considered; everything else is ignored. The resulting
    (categoria, subcategoria) pair, with omitted values taken from
    `current`, must be valid in the taxonomy.

    Args:
        body: Decoded JSON body.
        current: Product as currently stored.
        taxonomy: Taxonomy to validate against.

    Returns:
        Patch of clean values, possibly empty.

    Raises:
        ValidationError: On the first rule violated.
    """
    patch: dict[str, Any] = {}

    for field in UPDATABLE_FIELDS:
        if field not in body:
            continue
        value = body[field]

        if field == "precio":
            patch[field] = _clean_precio(value)
        elif field == "stock_disponible":
            patch[field] = _clean_stock(value)
        elif field == "categoria":
            patch[field] = _clean_text(field, value)
        elif field == "subcategoria":
            patch[field] = _clean_subcategoria(value)
        elif field in TEXT_FIELDS:
            patch[field] = _clean_text(field, value)
        elif field in ("requiere_receta", "activo"):
            patch[field] = coerce_bool(value)
        elif field == "imagen_url":
            patch[field] = "" if value is None else str(value)

    if "categoria" in patch or "subcategoria" in patch:
        categoria = patch.get("categoria", current.categoria)
        subcategoria = patch.get("subcategoria", current.subcategoria)
        taxonomy.validate(categoria, subcategoria)

    return patch
