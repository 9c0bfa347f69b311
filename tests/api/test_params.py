"""Tests for request parameter extraction."""

import pytest

from app.api.params import (
    CATEGORIA_PATTERN,
    CODIGO_BUSCAR_PATTERN,
    CODIGO_PATTERN,
    SUBCATEGORIA_PATTERN,
    SUBCATEGORIAS_DE_CATEGORIA_PATTERN,
    extract_path_param,
    query_float,
    query_int,
    query_params,
    query_value,
)


class TestExtractPathParam:
    """Tests for extract_path_param."""

    def test_path_map_first(self) -> None:
        """`path` map wins over every other source."""
        event = {
            "path": {"codigo": "A"},
            "pathParameters": {"codigo": "B"},
            "queryStringParameters": {"codigo": "C"},
        }
        assert extract_path_param(event, "codigo", CODIGO_PATTERN) == "A"

    def test_path_parameters(self) -> None:
        """pathParameters come second."""
        event = {"pathParameters": {"codigo": "B"}, "queryStringParameters": {"codigo": "C"}}
        assert extract_path_param(event, "codigo") == "B"

    def test_query_string(self) -> None:
        """Query string is the last keyed source."""
        assert extract_path_param({"queryStringParameters": {"codigo": "C"}}, "codigo") == "C"

    def test_resource(self) -> None:
        """Raw resource path is matched with the route pattern."""
        event = {"resource": "/productos/buscar/MED-1-ABC"}
        assert extract_path_param(event, "codigo", CODIGO_BUSCAR_PATTERN) == "MED-1-ABC"

    def test_request_path(self) -> None:
        """requestPath is matched after resource."""
        event = {"requestPath": "/productos/MED-2-XYZ?x=1"}
        assert extract_path_param(event, "codigo", CODIGO_PATTERN) == "MED-2-XYZ"

    def test_request_context_paths(self) -> None:
        """requestContext.resourcePath and requestContext.path are used last."""
        assert extract_path_param(
            {"requestContext": {"resourcePath": "/productos/categoria/Digestivos"}},
            "categoria",
            CATEGORIA_PATTERN,
        ) == "Digestivos"
        assert extract_path_param(
            {"requestContext": {"path": "/prod/productos/subcategoria/Jarabes"}},
            "subcategoria",
            SUBCATEGORIA_PATTERN,
        ) == "Jarabes"

    def test_route_template_is_skipped(self) -> None:
        """A resource template like {codigo} is not a value."""
        event = {
            "resource": "/productos/{codigo}",
            "requestPath": "/productos/MED-3-QQQ",
        }
        assert extract_path_param(event, "codigo", CODIGO_PATTERN) == "MED-3-QQQ"

    def test_decodes_once(self) -> None:
        """Values are URL-decoded exactly once."""
        event = {"pathParameters": {"subcategoria": "Leches%20de%20F%C3%B3rmula"}}
        assert extract_path_param(event, "subcategoria") == "Leches de Fórmula"

        event = {"pathParameters": {"codigo": "100%2525"}}
        assert extract_path_param(event, "codigo") == "100%25"

    def test_decodes_raw_path(self) -> None:
        """Values taken from a raw path are decoded too."""
        event = {"requestPath": "/productos/categorias/Analg%C3%A9sicos/subcategorias"}
        assert extract_path_param(
            event, "categoria", SUBCATEGORIAS_DE_CATEGORIA_PATTERN
        ) == "Analgésicos"

    def test_missing(self) -> None:
        """No source gives None."""
        assert extract_path_param({}, "codigo", CODIGO_PATTERN) is None
        assert extract_path_param({"pathParameters": None, "path": "/x"}, "codigo") is None
        assert extract_path_param({"pathParameters": {"codigo": ""}}, "codigo") is None


class TestQueryHelpers:
    """Tests for query-string helpers."""

    def test_query_params_never_none(self) -> None:
        """Missing query string is an empty dict."""
        assert query_params({"queryStringParameters": None}) == {}
        assert query_params({"queryStringParameters": {"a": "1"}}) == {"a": "1"}

    def test_query_value_aliases(self) -> None:
        """First non-empty alias wins."""
        assert query_value({"q": "", "search": "ibu"}, "q", "search") == "ibu"
        assert query_value({}, "q") is None

    @pytest.mark.parametrize(
        "raw,expected",
        [("10", 10), ("20abc", 20), ("0", 5), ("-3", 5), ("abc", 5), (None, 5)],
    )
    def test_query_int(self, raw: str | None, expected: int) -> None:
        """Positive integers parse, everything else is the default."""
        params = {"limit": raw} if raw is not None else {}
        assert query_int(params, "limit", default=5) == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [("10.5", 10.5), ("7", 7.0), ("abc", None), ("", None), ("inf", None)],
    )
    def test_query_float(self, raw: str, expected: float | None) -> None:
        """Finite numbers parse, the rest is None."""
        assert query_float({"precio_min": raw}, "precio_min") == expected
