"""Catalog exceptions.

Every error a handler can answer with a specific status code derives from
CatalogError. The user-visible message is Spanish, as the storefront shows it
verbatim; `details` carries extra response fields.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog exceptions.

    Attributes:
        status_code: HTTP status the error maps to.
        message: Human-readable error message.
        details: Additional fields merged into the error response body.
    """

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_body(self) -> dict[str, Any]:
        """Build the JSON body for an error response."""
        return {"error": self.message, **self.details}


# ============================================================================
# Request Errors (400)
# ============================================================================


class ValidationError(CatalogError):
    """Raised when a product payload breaks a field rule."""

    status_code = 400


class InvalidBodyError(CatalogError):
    """Raised when the request body is not a JSON object."""

    status_code = 400


class InvalidCursorError(CatalogError):
    """Raised when a pagination cursor cannot be decoded."""

    status_code = 400

    def __init__(self) -> None:
        super().__init__("lastKey inválido")


class MissingPathParameterError(CatalogError):
    """Raised when a route parameter cannot be found in the request."""

    status_code = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize missing path parameter error.

        Args:
            message: Message naming the missing parameter.
            details: Optional usage example(s) for the client.
        """
        super().__init__(message, details)


# ============================================================================
# Authentication Errors (401)
# ============================================================================


class AuthenticationError(CatalogError):
    """Base class for bearer token failures."""

    status_code = 401


class TokenMissingError(AuthenticationError):
    """Raised when no bearer token is present."""

    def __init__(self) -> None:
        super().__init__("Token requerido")


class TokenExpiredError(AuthenticationError):
    """Raised when the token signature is valid but it has expired."""

    def __init__(self) -> None:
        super().__init__("Token expirado")


class TokenInvalidError(AuthenticationError):
    """Raised when the token is malformed, badly signed or lacks tenant_id."""

    def __init__(self) -> None:
        super().__init__("Token inválido")


class TokenVerificationError(AuthenticationError):
    """Raised for any other verification failure."""

    def __init__(self) -> None:
        super().__init__("Error validando token")


# ============================================================================
# Lookup Errors (404)
# ============================================================================


class ProductNotFoundError(CatalogError):
    """Raised when a (tenant, codigo) pair does not exist."""

    status_code = 404

    def __init__(self, codigo: str | None = None) -> None:
        """Initialize product not found error.

        Args:
            codigo: Code that was looked up. Not echoed to the client.
        """
        super().__init__("Producto no encontrado")
        self.codigo = codigo


class CategoryNotFoundError(CatalogError):
    """Raised when a category is not part of the taxonomy."""

    status_code = 404

    def __init__(self, categoria: str, available: list[str]) -> None:
        """Initialize category not found error.

        Args:
            categoria: The unknown category.
            available: All registered categories.
        """
        super().__init__(
            f"Categoría '{categoria}' no encontrada",
            details={"categorias_disponibles": available},
        )


# ============================================================================
# Store Errors
# ============================================================================


class ProductAlreadyExistsError(CatalogError):
    """Raised by a non-overwriting put when the key is taken."""

    status_code = 409

    def __init__(self, tenant_id: str, codigo: str) -> None:
        super().__init__(
            "El producto ya existe",
            details={"codigo": codigo},
        )
        self.tenant_id = tenant_id
