"""Shared fixtures for catalog tests."""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generator

import jwt
import pytest
from fastapi.testclient import TestClient

from app.api.productos import get_catalog_context
from app.application.context import CatalogContext, set_context
from app.catalog.memory import InMemoryCatalogStore
from app.infrastructure.config import Settings
from app.main import app

JWT_SECRET = "catalogo-test-secret-" * 4
TENANT = "farmacia-centro"
OTHER_TENANT = "farmacia-norte"


# ============================================================================
# Settings and context
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings with a known secret and the in-memory store."""
    return Settings(
        jwt_secret=JWT_SECRET,
        store_backend="memory",
        default_page_size=20,
    )


@pytest.fixture
def store() -> InMemoryCatalogStore:
    """Empty in-memory store."""
    return InMemoryCatalogStore()


@pytest.fixture
def ctx(settings: Settings, store: InMemoryCatalogStore) -> CatalogContext:
    """Handler context over the in-memory store."""
    return CatalogContext(settings=settings, store=store)


# ============================================================================
# Tokens and events
# ============================================================================


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Factory for signed tokens."""

    def _make_token(
        tenant_id: str | None = TENANT,
        secret: str = JWT_SECRET,
        expires_in: int = 3600,
        algorithm: str = "HS256",
        **claims: Any,
    ) -> str:
        payload: dict[str, Any] = {
            "sub": "user-1",
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            **claims,
        }
        if tenant_id is not None:
            payload["tenant_id"] = tenant_id
        return jwt.encode(payload, secret, algorithm=algorithm)

    return _make_token


@pytest.fixture
def make_event(make_token: Callable[..., str]) -> Callable[..., dict[str, Any]]:
    """Factory for authenticated handler events."""

    def _make_event(
        tenant_id: str = TENANT,
        path: str = "/productos",
        path_parameters: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
        body: Any = None,
        token: str | None = None,
    ) -> dict[str, Any]:
        return {
            "requestPath": path,
            "headers": {"Authorization": f"Bearer {token or make_token(tenant_id)}"},
            "pathParameters": path_parameters,
            "queryStringParameters": query,
            "body": json.dumps(body) if body is not None else None,
        }

    return _make_event


@pytest.fixture
def producto_payload() -> Callable[..., dict[str, Any]]:
    """Factory for valid create payloads."""

    def _payload(**overrides: Any) -> dict[str, Any]:
        payload = {
            "nombre": "Paracetamol 500mg",
            "precio": 12.5,
            "descripcion": "Analgésico y antipirético",
            "categoria": "Analgésicos",
            "subcategoria": "Paracetamol",
            "stock_disponible": 10,
            "requiere_receta": False,
            "laboratorio": "Genfar",
            "presentacion": "Caja x 20 tabletas",
        }
        payload.update(overrides)
        return payload

    return _payload


# ============================================================================
# HTTP client
# ============================================================================


@pytest.fixture
def client(ctx: CatalogContext) -> Generator[TestClient, None, None]:
    """Test client wired to the in-memory context."""
    set_context(ctx)
    app.dependency_overrides[get_catalog_context] = lambda: ctx
    yield TestClient(app)
    app.dependency_overrides.clear()
    set_context(None)


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> dict[str, str]:
    """Authorization headers for the default tenant."""
    return {"Authorization": f"Bearer {make_token()}"}
