"""Request parameter extraction.

Events reach the handlers in more than one shape: the HTTP router passes
pathParameters, some gateway mappings pass a `path` object, and older
integrations only provide the raw path. Path parameters are looked up in every
known location, in a fixed order, and URL-decoded exactly once.
"""

import math
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote

from app.catalog.validation import parse_int

# Route patterns used when a parameter must be parsed out of a raw path
CODIGO_BUSCAR_PATTERN = re.compile(r"/productos/buscar/([^/?]+)")
CODIGO_PATTERN = re.compile(r"/productos/([^/?]+)")
CATEGORIA_PATTERN = re.compile(r"/productos/categoria/([^/?]+)")
SUBCATEGORIA_PATTERN = re.compile(r"/productos/subcategoria/([^/?]+)")
SUBCATEGORIAS_DE_CATEGORIA_PATTERN = re.compile(r"/productos/categorias/([^/?]+)/subcategorias")

_TEMPLATE_PLACEHOLDER = re.compile(r"^\{[^}]*\}$")


def _mapping_value(source: Any, name: str) -> str | None:
    if isinstance(source, Mapping):
        value = source.get(name)
        if isinstance(value, str) and value:
            return value
    return None


def _path_match(path: Any, pattern: re.Pattern[str]) -> str | None:
    if not isinstance(path, str):
        return None
    match = pattern.search(path)
    if not match:
        return None
    value = match.group(1)
    # API Gateway `resource` holds the route template, e.g. /productos/{codigo}
    if _TEMPLATE_PLACEHOLDER.match(unquote(value)):
        return None
    return value


def extract_path_param(
    event: Mapping[str, Any],
    name: str,
    pattern: re.Pattern[str] | None = None,
) -> str | None:
    """Resolve a named path parameter from a request event.

    Sources, in order: `path[name]`, `pathParameters[name]`,
    `queryStringParameters[name]`, then `pattern` over `resource`,
    `requestPath`, `requestContext.resourcePath` and `requestContext.path`.

    Args:
        event: Request event.
        name: Parameter name (e.g. "codigo").
        pattern: Route regex whose first group captures the parameter.

    Returns:
        The URL-decoded value, or None when no source has it.
    """
    raw = (
        _mapping_value(event.get("path"), name)
        or _mapping_value(event.get("pathParameters"), name)
        or _mapping_value(event.get("queryStringParameters"), name)
    )

    if raw is None and pattern is not None:
        context = event.get("requestContext")
        if not isinstance(context, Mapping):
            context = {}
        for path in (
            event.get("resource"),
            event.get("requestPath"),
            context.get("resourcePath"),
            context.get("path"),
        ):
            raw = _path_match(path, pattern)
            if raw is not None:
                break

    return unquote(raw) if raw is not None else None


def query_params(event: Mapping[str, Any]) -> dict[str, str]:
    """Get the query-string parameters of an event (never None)."""
    params = event.get("queryStringParameters")
    return dict(params) if isinstance(params, Mapping) else {}


def query_value(params: Mapping[str, str], *names: str) -> str | None:
    """Get the first non-empty value among several parameter aliases."""
    for name in names:
        value = params.get(name)
        if value:
            return value
    return None


def query_int(params: Mapping[str, str], *names: str, default: int) -> int:
    """Parse a positive integer parameter.

    Leading digits are used ("20abc" is 20). Missing, unparsable and
    non-positive values fall back to the default.
    """
    number = parse_int(query_value(params, *names))
    return number if number is not None and number > 0 else default


def query_float(params: Mapping[str, str], name: str) -> float | None:
    """Parse a real-number parameter; None when missing or unparsable."""
    value = params.get(name)
    if not value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None
