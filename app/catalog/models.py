"""Product model for the catalog.

A Producto is the only persistent entity. It is keyed by (tenant_id, codigo)
and serialized as a flat JSON object with the field names the storefront uses.
"""

import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CODE_PREFIX = "MED"
_BASE36_ALPHABET = string.digits + string.ascii_uppercase


class Producto(BaseModel):
    """Pharmaceutical or parapharmaceutical product of one tenant.

    Attributes:
        tenant_id: Owning tenant (partition key), always taken from the token.
        codigo: Server-generated code (sort key).
        nombre: Product name.
        precio: Unit price, strictly positive.
        descripcion: Free-text description.
        categoria: Taxonomy category.
        subcategoria: Taxonomy subcategory of `categoria`, or None.
        stock_disponible: Units available, never negative.
        requiere_receta: Whether a prescription is required.
        laboratorio: Manufacturer.
        presentacion: Packaging (e.g. "Caja x 20").
        imagen_url: Opaque URL from the image service, possibly empty.
        fecha_creacion: ISO-8601 creation instant.
        fecha_modificacion: ISO-8601 instant of the last mutation.
        activo: Soft-visibility flag for search and browse endpoints.
    """

    model_config = ConfigDict(extra="ignore")

    tenant_id: str
    codigo: str
    nombre: str
    precio: float = Field(gt=0)
    descripcion: str
    categoria: str
    subcategoria: str | None = None
    stock_disponible: int = Field(default=0, ge=0)
    requiere_receta: bool = False
    laboratorio: str
    presentacion: str
    imagen_url: str = ""
    fecha_creacion: str
    fecha_modificacion: str
    activo: bool = True

    @property
    def key(self) -> dict[str, str]:
        """Primary key of the item, in the shape used by pagination cursors."""
        return {"tenant_id": self.tenant_id, "codigo": self.codigo}

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return self.model_dump(mode="json")


# ============================================================================
# Codes and timestamps
# ============================================================================


def to_base36(value: int) -> str:
    """Encode a non-negative integer in upper-case base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_codigo(now: datetime | None = None) -> str:
    """Generate a product code: MED-<base36 epoch millis>-<6 random base36 chars>.

    Codes of the same length sort by creation time, which keeps
    sort-key order close to newest/oldest order.
    """
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(6))
    return f"{CODE_PREFIX}-{to_base36(millis)}-{suffix}"


def format_timestamp(moment: datetime) -> str:
    """Format an instant as ISO-8601 UTC with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp produced by format_timestamp."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def next_modification_timestamp(previous: str, now: datetime) -> str:
    """Get a modification timestamp strictly after `previous`.

    Args:
        previous: The product's current fecha_modificacion.
        now: Current instant.

    Returns:
        `now` formatted, or `previous` plus one millisecond when the clock
        has not moved past it.
    """
    candidate = format_timestamp(now)
    if candidate <= previous:
        candidate = format_timestamp(parse_timestamp(previous) + timedelta(milliseconds=1))
    return candidate
