"""SQLAlchemy table definitions.

The catalog lives in a single table whose name comes from configuration
(TABLE_NAME), so tables are built on demand instead of declared statically.
"""

from sqlalchemy import Boolean, Column, Float, Integer, MetaData, String, Table, Text

metadata = MetaData()


def productos_table(name: str) -> Table:
    """Get the products table with the given name, defining it on first use.

    The primary key is (tenant_id, codigo): tenant_id partitions the data
    and codigo orders the items inside a partition.

    Args:
        name: Table name.

    Returns:
        SQLAlchemy Table registered in the module metadata.
    """
    if name in metadata.tables:
        return metadata.tables[name]

    return Table(
        name,
        metadata,
        Column("tenant_id", String(100), primary_key=True),
        Column("codigo", String(64), primary_key=True),
        Column("nombre", String(500), nullable=False),
        Column("precio", Float, nullable=False),
        Column("descripcion", Text, nullable=False),
        Column("categoria", String(100), nullable=False),
        Column("subcategoria", String(100), nullable=True),
        Column("stock_disponible", Integer, nullable=False, default=0),
        Column("requiere_receta", Boolean, nullable=False, default=False),
        Column("laboratorio", String(200), nullable=False),
        Column("presentacion", String(200), nullable=False),
        Column("imagen_url", String(1000), nullable=False, default=""),
        Column("fecha_creacion", String(32), nullable=False),
        Column("fecha_modificacion", String(32), nullable=False),
        Column("activo", Boolean, nullable=False, default=True),
    )
