"""Pharmacy product taxonomy.

Two-level classification used by the whole catalog: each category maps to an
ordered list of subcategories. Display names are the identifiers themselves
(they may contain spaces and accents) and are compared exactly.

Example:
    Analgésicos > Antiinflamatorios
    Cuidado del Bebé > Pañales
"""

from collections.abc import Mapping
from types import MappingProxyType

from app.domain.exceptions import ValidationError

CATEGORIAS_DISPONIBLES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    # Medicamentos
    "Analgésicos": ("Antiinflamatorios", "Paracetamol", "Aspirinas", "Opioides"),
    "Antibióticos": ("Penicilinas", "Cefalosporinas", "Macrólidos", "Quinolonas"),
    "Vitaminas y Minerales": (
        "Multivitamínicos",
        "Vitamina C",
        "Vitamina D",
        "Vitamina B",
        "Calcio",
        "Hierro",
        "Magnesio",
    ),
    "Digestivos": (
        "Antiácidos",
        "Laxantes",
        "Antidiarreicos",
        "Probióticos",
        "Enzimas Digestivas",
    ),
    "Respiratorios": (
        "Jarabes",
        "Descongestionantes",
        "Broncodilatadores",
        "Antihistamínicos",
    ),
    "Cardiovasculares": (
        "Antihipertensivos",
        "Diuréticos",
        "Anticoagulantes",
        "Estatinas",
    ),
    # Cuidado personal
    "Higiene Personal": (
        "Jabones",
        "Champús",
        "Acondicionadores",
        "Desodorantes",
        "Gel de Baño",
    ),
    "Cuidado Bucal": (
        "Pasta Dental",
        "Enjuague Bucal",
        "Hilo Dental",
        "Cepillos de Dientes",
    ),
    "Protección Solar": (
        "Bloqueadores",
        "After Sun",
        "Bronceadores",
        "Protector Labial",
    ),
    "Cuidado de la Piel": (
        "Cremas Hidratantes",
        "Lociones",
        "Tratamientos Anti-edad",
        "Limpiadores Faciales",
    ),
    "Cuidado Capilar": (
        "Tratamientos",
        "Tintes",
        "Mascarillas",
        "Aceites Capilares",
    ),
    # Bebé y maternidad
    "Alimentación Infantil": (
        "Leches de Fórmula",
        "Papillas",
        "Cereales",
        "Complementos Nutricionales",
    ),
    "Cuidado del Bebé": (
        "Pañales",
        "Toallitas",
        "Cremas",
        "Champús Bebé",
        "Talcos",
    ),
    "Maternidad": (
        "Vitaminas Prenatales",
        "Cremas Anti-estrías",
        "Suplementos Lactancia",
    ),
    # Nutrición y bienestar
    "Suplementos Deportivos": (
        "Proteínas",
        "Pre-entreno",
        "Post-entreno",
        "Aminoácidos",
        "Creatina",
    ),
    "Productos Naturales": (
        "Hierbas Medicinales",
        "Aceites Esenciales",
        "Suplementos Herbales",
    ),
    "Control de Peso": (
        "Quemadores de Grasa",
        "Bloqueadores",
        "Sustitutos de Comida",
    ),
    # Adulto mayor
    "Tercera Edad": (
        "Suplementos Óseos",
        "Memoria y Concentración",
        "Articulaciones",
        "Energía",
    ),
    # Productos médicos
    "Equipos Médicos": (
        "Tensiómetros",
        "Glucómetros",
        "Termómetros",
        "Nebulizadores",
    ),
    "Primeros Auxilios": (
        "Vendas",
        "Gasas",
        "Alcohol",
        "Curitas",
        "Antisépticos",
    ),
    # Sexualidad
    "Salud Sexual": (
        "Preservativos",
        "Lubricantes",
        "Pruebas de Embarazo",
        "Anticonceptivos",
    ),
    # Hogar
    "Limpieza y Desinfección": (
        "Desinfectantes",
        "Alcohol en Gel",
        "Mascarillas",
        "Guantes",
    ),
})


class Taxonomy:
    """Read-only view over a category → subcategories mapping.

    Example usage:
        taxonomy = Taxonomy()
        taxonomy.get_subcategories("Analgésicos")
        taxonomy.validate("Analgésicos", "Paracetamol")
    """

    def __init__(self, categories: Mapping[str, tuple[str, ...]] = CATEGORIAS_DISPONIBLES) -> None:
        """Initialize taxonomy.

        Args:
            categories: Category → subcategories mapping. Lists are copied to tuples.
        """
        self._categories: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {name: tuple(subs) for name, subs in categories.items()}
        )

    def __contains__(self, categoria: object) -> bool:
        return categoria in self._categories

    def __len__(self) -> int:
        return len(self._categories)

    @property
    def categories(self) -> list[str]:
        """Category names in registration order."""
        return list(self._categories)

    def get_subcategories(self, categoria: str) -> list[str] | None:
        """Get the subcategories of a category.

        Args:
            categoria: Category display name.

        Returns:
            Ordered subcategory names, or None if the category is unknown.
        """
        subcategories = self._categories.get(categoria)
        return list(subcategories) if subcategories is not None else None

    def validate(self, categoria: str, subcategoria: str | None = None) -> None:
        """Check that a category (and optional subcategory) is registered.

        Args:
            categoria: Category display name.
            subcategoria: Subcategory display name, or None/"" for none.

        Raises:
            ValidationError: If the category is unknown or the subcategory
                does not belong to it. The message lists the valid options.
        """
        if categoria not in self._categories:
            raise ValidationError(
                f"Categoría '{categoria}' no válida. "
                f"Categorías disponibles: {', '.join(self._categories)}"
            )

        allowed = self._categories[categoria]
        if subcategoria and subcategoria not in allowed:
            raise ValidationError(
                f"Subcategoría '{subcategoria}' no válida para '{categoria}'. "
                f"Subcategorías disponibles: {', '.join(allowed)}"
            )

    def as_dict(self) -> dict[str, list[str]]:
        """Get a JSON-serializable copy of the whole taxonomy."""
        return {name: list(subs) for name, subs in self._categories.items()}

