"""Tests for bearer token authentication."""

from typing import Callable

import pytest

from app.api.auth import authenticate, extract_bearer_token, verify_token
from app.domain.exceptions import (
    AuthenticationError,
    TokenExpiredError,
    TokenInvalidError,
    TokenMissingError,
    TokenVerificationError,
)
from app.infrastructure.config import Settings


class TestExtractBearerToken:
    """Tests for header parsing."""

    def test_capitalized_header(self) -> None:
        """Authorization header is read."""
        assert extract_bearer_token({"Authorization": "Bearer abc"}) == "abc"

    def test_lowercase_header(self) -> None:
        """authorization header is read too."""
        assert extract_bearer_token({"authorization": "Bearer abc"}) == "abc"

    @pytest.mark.parametrize(
        "headers",
        [None, {}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer "}, {"Authorization": "abc"}],
    )
    def test_no_token(self, headers: dict[str, str] | None) -> None:
        """Missing or non-bearer headers give no token."""
        assert extract_bearer_token(headers) is None


class TestVerifyToken:
    """Tests for token verification."""

    def test_valid_token(self, settings: Settings, make_token: Callable[..., str]) -> None:
        """Valid token yields the tenant."""
        principal = verify_token(make_token("farmacia-sur", role="admin"), settings)
        assert principal.tenant_id == "farmacia-sur"
        assert principal.claims["role"] == "admin"

    @pytest.mark.parametrize("algorithm", ["HS384", "HS512"])
    def test_other_hmac_algorithms(
        self, settings: Settings, make_token: Callable[..., str], algorithm: str
    ) -> None:
        """HS384 and HS512 are accepted."""
        assert verify_token(make_token(algorithm=algorithm), settings).tenant_id

    def test_expired(self, settings: Settings, make_token: Callable[..., str]) -> None:
        """Expired tokens are rejected as expired."""
        with pytest.raises(TokenExpiredError) as exc_info:
            verify_token(make_token(expires_in=-60), settings)
        assert exc_info.value.message == "Token expirado"

    def test_wrong_secret(self, settings: Settings, make_token: Callable[..., str]) -> None:
        """Bad signatures are invalid."""
        with pytest.raises(TokenInvalidError) as exc_info:
            verify_token(make_token(secret="otro-secreto-" * 6), settings)
        assert exc_info.value.message == "Token inválido"

    def test_garbage(self, settings: Settings) -> None:
        """Malformed tokens are invalid."""
        with pytest.raises(TokenInvalidError):
            verify_token("no.es.jwt", settings)

    def test_missing_tenant(self, settings: Settings, make_token: Callable[..., str]) -> None:
        """tenant_id claim is required."""
        with pytest.raises(TokenInvalidError):
            verify_token(make_token(tenant_id=None), settings)

    def test_non_string_tenant(self, settings: Settings, make_token: Callable[..., str]) -> None:
        """tenant_id must be a non-empty string."""
        with pytest.raises(TokenInvalidError):
            verify_token(make_token(tenant_id=42), settings)

    def test_secret_not_configured(self, make_token: Callable[..., str]) -> None:
        """Without a secret nothing verifies."""
        with pytest.raises(TokenVerificationError) as exc_info:
            verify_token(make_token(), Settings(jwt_secret=""))
        assert exc_info.value.message == "Error validando token"


class TestAuthenticate:
    """Tests for event authentication."""

    def test_missing_token(self, settings: Settings) -> None:
        """Events without a token are rejected."""
        with pytest.raises(TokenMissingError) as exc_info:
            authenticate({"headers": {}}, settings)
        assert exc_info.value.message == "Token requerido"
        assert exc_info.value.status_code == 401

    def test_no_headers(self, settings: Settings) -> None:
        """Events without headers are rejected."""
        with pytest.raises(AuthenticationError):
            authenticate({}, settings)

    def test_authenticated(self, settings: Settings, make_token: Callable[..., str]) -> None:
        """Valid bearer token authenticates."""
        event = {"headers": {"authorization": f"Bearer {make_token('farmacia-sur')}"}}
        assert authenticate(event, settings).tenant_id == "farmacia-sur"
