"""Tests for product payload validation."""

from typing import Any, Callable

import pytest

from app.catalog.models import Producto
from app.catalog.taxonomy import Taxonomy
from app.catalog.validation import (
    PRECIO_ERROR,
    STOCK_ERROR,
    coerce_bool,
    parse_float,
    parse_int,
    validate_create,
    validate_update,
)
from app.domain.exceptions import ValidationError


@pytest.fixture
def taxonomy() -> Taxonomy:
    """Built-in taxonomy."""
    return Taxonomy()


@pytest.fixture
def current() -> Producto:
    """Stored product used as update base."""
    return Producto(
        tenant_id="farmacia-centro",
        codigo="MED-1-ABCDEF",
        nombre="Paracetamol 500mg",
        precio=12.5,
        descripcion="Analgésico",
        categoria="Analgésicos",
        subcategoria="Paracetamol",
        laboratorio="Genfar",
        presentacion="Caja x 20",
        fecha_creacion="2024-03-01T12:30:45.123Z",
        fecha_modificacion="2024-03-01T12:30:45.123Z",
    )


class TestCoercion:
    """Tests for value coercion helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [(10, 10.0), ("12.5", 12.5), (" 3 ", 3.0), ("abc", None), (True, None), ("nan", None)],
    )
    def test_parse_float(self, value: Any, expected: float | None) -> None:
        """Numbers and numeric strings parse, the rest is None."""
        assert parse_float(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [(5, 5), ("20abc", 20), ("12.7", 12), (3.9, 3), ("-2", -2), ("x", None), (False, None)],
    )
    def test_parse_int(self, value: Any, expected: int | None) -> None:
        """Leading integer digits are used."""
        assert parse_int(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [(True, True), ("true", True), ("false", False), ("0", False), ("no", False), (0, False)],
    )
    def test_coerce_bool(self, value: Any, expected: bool) -> None:
        """Strings like "false" are false."""
        assert coerce_bool(value) is expected


class TestValidateCreate:
    """Tests for create payload validation."""

    def test_valid_payload(
        self, taxonomy: Taxonomy, producto_payload: Callable[..., dict[str, Any]]
    ) -> None:
        """Valid payload yields clean fields."""
        fields = validate_create(producto_payload(precio="12.50", nombre="  Paracetamol  "), taxonomy)
        assert fields["precio"] == 12.5
        assert fields["nombre"] == "Paracetamol"
        assert fields["activo"] is True
        assert fields["imagen_url"] == ""

    @pytest.mark.parametrize(
        "field", ["nombre", "precio", "descripcion", "categoria", "laboratorio", "presentacion"]
    )
    def test_required_fields(
        self,
        taxonomy: Taxonomy,
        producto_payload: Callable[..., dict[str, Any]],
        field: str,
    ) -> None:
        """Every required field is checked."""
        payload = producto_payload()
        del payload[field]
        with pytest.raises(ValidationError) as exc_info:
            validate_create(payload, taxonomy)
        assert exc_info.value.message == f"Campo requerido: {field}"

    @pytest.mark.parametrize("precio", [0, -1, "abc", "0"])
    def test_invalid_price(
        self,
        taxonomy: Taxonomy,
        producto_payload: Callable[..., dict[str, Any]],
        precio: Any,
    ) -> None:
        """Price must be a number above zero."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create(producto_payload(precio=precio), taxonomy)
        assert exc_info.value.message == PRECIO_ERROR

    @pytest.mark.parametrize("stock", [-1, "abc"])
    def test_invalid_stock(
        self,
        taxonomy: Taxonomy,
        producto_payload: Callable[..., dict[str, Any]],
        stock: Any,
    ) -> None:
        """Stock must be a non-negative integer."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create(producto_payload(stock_disponible=stock), taxonomy)
        assert exc_info.value.message == STOCK_ERROR

    def test_stock_defaults_to_zero(
        self, taxonomy: Taxonomy, producto_payload: Callable[..., dict[str, Any]]
    ) -> None:
        """Missing stock is zero."""
        payload = producto_payload()
        del payload["stock_disponible"]
        assert validate_create(payload, taxonomy)["stock_disponible"] == 0

    def test_string_boolean(
        self, taxonomy: Taxonomy, producto_payload: Callable[..., dict[str, Any]]
    ) -> None:
        """requiere_receta "false" is False."""
        fields = validate_create(producto_payload(requiere_receta="false"), taxonomy)
        assert fields["requiere_receta"] is False

    def test_non_text_field(
        self, taxonomy: Taxonomy, producto_payload: Callable[..., dict[str, Any]]
    ) -> None:
        """Text fields must be strings."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create(producto_payload(laboratorio=123), taxonomy)
        assert exc_info.value.message == "laboratorio debe ser texto"

    def test_unknown_category(
        self, taxonomy: Taxonomy, producto_payload: Callable[..., dict[str, Any]]
    ) -> None:
        """Category must be in the taxonomy."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create(producto_payload(categoria="Inventada", subcategoria=None), taxonomy)
        assert exc_info.value.message.startswith("Categoría 'Inventada' no válida")

    def test_subcategory_of_other_category(
        self, taxonomy: Taxonomy, producto_payload: Callable[..., dict[str, Any]]
    ) -> None:
        """Subcategory must belong to the category."""
        with pytest.raises(ValidationError) as exc_info:
            validate_create(producto_payload(subcategoria="Penicilinas"), taxonomy)
        assert exc_info.value.message.startswith("Subcategoría 'Penicilinas' no válida")

    def test_client_key_fields_ignored(
        self, taxonomy: Taxonomy, producto_payload: Callable[..., dict[str, Any]]
    ) -> None:
        """tenant_id and codigo from the body are dropped."""
        fields = validate_create(producto_payload(tenant_id="otro", codigo="X"), taxonomy)
        assert "tenant_id" not in fields
        assert "codigo" not in fields


class TestValidateUpdate:
    """Tests for update payload validation."""

    def test_only_updatable_fields(self, taxonomy: Taxonomy, current: Producto) -> None:
        """Unknown and key fields are ignored."""
        patch = validate_update(
            {"precio": "15", "codigo": "X", "tenant_id": "otro", "fecha_creacion": "x"},
            current,
            taxonomy,
        )
        assert patch == {"precio": 15.0}

    def test_empty_body(self, taxonomy: Taxonomy, current: Producto) -> None:
        """Empty body gives an empty patch."""
        assert validate_update({}, current, taxonomy) == {}

    def test_invalid_price(self, taxonomy: Taxonomy, current: Producto) -> None:
        """Price is validated like on create."""
        with pytest.raises(ValidationError) as exc_info:
            validate_update({"precio": 0}, current, taxonomy)
        assert exc_info.value.message == PRECIO_ERROR

    def test_category_change_revalidates_stored_subcategory(
        self, taxonomy: Taxonomy, current: Producto
    ) -> None:
        """Changing only the category checks it against the stored subcategory."""
        with pytest.raises(ValidationError) as exc_info:
            validate_update({"categoria": "Antibióticos"}, current, taxonomy)
        assert exc_info.value.message.startswith("Subcategoría 'Paracetamol' no válida")

    def test_category_and_subcategory_together(
        self, taxonomy: Taxonomy, current: Producto
    ) -> None:
        """Moving to a new valid pair is accepted."""
        patch = validate_update(
            {"categoria": "Antibióticos", "subcategoria": "Penicilinas"}, current, taxonomy
        )
        assert patch == {"categoria": "Antibióticos", "subcategoria": "Penicilinas"}

    def test_subcategory_alone_is_validated(self, taxonomy: Taxonomy, current: Producto) -> None:
        """Subcategory is checked against the stored category."""
        with pytest.raises(ValidationError):
            validate_update({"subcategoria": "Jarabes"}, current, taxonomy)

    def test_clear_subcategory(self, taxonomy: Taxonomy, current: Producto) -> None:
        """Null subcategory clears it."""
        assert validate_update({"subcategoria": None}, current, taxonomy) == {"subcategoria": None}

    def test_booleans_coerced(self, taxonomy: Taxonomy, current: Producto) -> None:
        """activo "false" deactivates the product."""
        assert validate_update({"activo": "false"}, current, taxonomy) == {"activo": False}
