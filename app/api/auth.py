"""Bearer token authentication.

Tokens are issued by the identity service and signed with a shared HMAC
secret. The only claim the catalog relies on is tenant_id, which scopes every
read and write.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import jwt
import structlog

from app.domain.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
    TokenMissingError,
    TokenVerificationError,
)
from app.infrastructure.config import Settings

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "
AUTH_HEADER_NAMES = ("Authorization", "authorization")


@dataclass(frozen=True)
class Principal:
    """Authenticated caller.

    Attributes:
        tenant_id: Tenant the caller belongs to.
        claims: Full decoded claims set.
    """

    tenant_id: str
    claims: Mapping[str, Any] = field(default_factory=dict)


def extract_bearer_token(headers: Mapping[str, Any] | None) -> str | None:
    """Get the bearer token from request headers.

    `Authorization` is checked first, then `authorization`. A header that
    does not start with "Bearer " is ignored.

    Args:
        headers: Request headers, possibly None.

    Returns:
        The token, or None if none was found.
    """
    if not headers:
        return None

    for name in AUTH_HEADER_NAMES:
        value = headers.get(name)
        if isinstance(value, str) and value.startswith(BEARER_PREFIX):
            token = value[len(BEARER_PREFIX):]
            if token:
                return token
    return None


def verify_token(token: str, settings: Settings) -> Principal:
    """Verify a token signature and expiry.

    Args:
        token: Encoded JWT.
        settings: Settings holding the secret and accepted algorithms.

    Returns:
        Principal built from the claims.

    Raises:
        TokenExpiredError: If the token has expired.
        TokenInvalidError: If the signature, format or tenant_id claim is bad.
        TokenVerificationError: For any other verification failure,
            including a missing secret.
    """
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured")
        raise TokenVerificationError()

    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=settings.jwt_algorithms,
            options={"require": ["tenant_id"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError() from e
    except jwt.InvalidTokenError as e:
        raise TokenInvalidError() from e
    except jwt.PyJWTError as e:
        logger.warning("Token verification failed", error=str(e))
        raise TokenVerificationError() from e

    tenant_id = claims.get("tenant_id")
    if not isinstance(tenant_id, str) or not tenant_id:
        raise TokenInvalidError()

    return Principal(tenant_id=tenant_id, claims=claims)


def authenticate(event: Mapping[str, Any], settings: Settings) -> Principal:
    """Authenticate a handler event.

    Args:
        event: Request event with a `headers` mapping.
        settings: Application settings.

    Returns:
        The authenticated principal.

    Raises:
        AuthenticationError: Any of its subclasses, mapped to HTTP 401.
    """
    token = extract_bearer_token(event.get("headers"))
    if token is None:
        raise TokenMissingError()
    return verify_token(token, settings)
