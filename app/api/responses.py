"""Response envelope shared by every handler.

Handlers answer with gateway-style dictionaries: a status code, the CORS
headers the storefront needs, and a JSON string body.
"""

import json
from collections.abc import Mapping
from typing import Any

from app.domain.exceptions import CatalogError, InvalidBodyError

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
}

RESPONSE_HEADERS = {"Content-Type": "application/json", **CORS_HEADERS}

INTERNAL_ERROR_MESSAGE = "Error interno del servidor"


def json_response(status_code: int, body: Any) -> dict[str, Any]:
    """Build a handler response.

    Args:
        status_code: HTTP status code.
        body: JSON-serializable body.

    Returns:
        Dict with statusCode, headers and a JSON-encoded body.
    """
    return {
        "statusCode": status_code,
        "headers": dict(RESPONSE_HEADERS),
        "body": json.dumps(body, ensure_ascii=False, default=str),
    }


def error_response(error: CatalogError) -> dict[str, Any]:
    """Build the response for a catalog error."""
    return json_response(error.status_code, error.to_body())


def internal_error_response() -> dict[str, Any]:
    """Build the generic 500 response; internals are never echoed."""
    return json_response(500, {"error": INTERNAL_ERROR_MESSAGE})


def parse_json_body(event: Mapping[str, Any]) -> dict[str, Any]:
    """Decode the JSON object body of an event.

    The body may arrive as a JSON string or already decoded. A missing or
    empty body is an empty object.

    Raises:
        InvalidBodyError: If the body is not valid JSON or not an object.
    """
    raw = event.get("body")
    if raw is None or raw == "":
        return {}

    if isinstance(raw, (str, bytes, bytearray)):
        try:
            body = json.loads(raw)
        except ValueError as e:
            raise InvalidBodyError("JSON inválido") from e
    else:
        body = raw

    if not isinstance(body, dict):
        raise InvalidBodyError("Formato de body no soportado")
    return body
