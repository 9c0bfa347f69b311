"""Domain layer - catalog errors.

Example usage:
    from app.domain import ProductNotFoundError

    raise ProductNotFoundError("MED-KX2A1B-7QZP4R")
"""

from app.domain.exceptions import (
    AuthenticationError,
    CatalogError,
    CategoryNotFoundError,
    InvalidBodyError,
    InvalidCursorError,
    MissingPathParameterError,
    ProductAlreadyExistsError,
    ProductNotFoundError,
    TokenExpiredError,
    TokenInvalidError,
    TokenMissingError,
    TokenVerificationError,
    ValidationError,
)

__all__ = [
    "AuthenticationError",
    "CatalogError",
    "CategoryNotFoundError",
    "InvalidBodyError",
    "InvalidCursorError",
    "MissingPathParameterError",
    "ProductAlreadyExistsError",
    "ProductNotFoundError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenMissingError",
    "TokenVerificationError",
    "ValidationError",
]
