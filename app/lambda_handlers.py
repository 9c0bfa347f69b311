"""Function-as-a-service entry points.

One synchronous `(event, context)` callable per catalog operation, for
deployments that invoke the handlers directly from an API gateway instead of
going through the HTTP app.
"""

import asyncio
from typing import Any

from app.api import handlers
from app.api.handlers import Handler
from app.application.context import CatalogContext, get_context
from app.catalog.repository import SqlAlchemyCatalogStore
from app.catalog.store import CatalogStore
from app.infrastructure.config import get_settings
from app.infrastructure.log_config import configure_logging

configure_logging(get_settings().log_level, get_settings().log_json)

# Reused across invocations; pooled database connections are bound to one loop
_loop = asyncio.new_event_loop()

# Store whose table has been created in this process
_schema_store: CatalogStore | None = None


async def _prepare(ctx: CatalogContext) -> None:
    """Create the products table the first time a SQL store is used."""
    global _schema_store
    if ctx.store is _schema_store:
        return
    if isinstance(ctx.store, SqlAlchemyCatalogStore):
        await ctx.store.create_schema()
    _schema_store = ctx.store


async def _invoke(handler: Handler, event: dict[str, Any]) -> dict[str, Any]:
    ctx = get_context()
    await _prepare(ctx)
    return await handler(event, ctx)


def _entry_point(handler: Handler):
    def entry_point(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
        return _loop.run_until_complete(_invoke(handler, event))

    entry_point.__name__ = handler.__name__
    entry_point.__doc__ = handler.__doc__
    return entry_point


listar_productos = _entry_point(handlers.listar_productos)
crear_producto = _entry_point(handlers.crear_producto)
buscar_producto = _entry_point(handlers.buscar_producto)
modificar_producto = _entry_point(handlers.modificar_producto)
eliminar_producto = _entry_point(handlers.eliminar_producto)
filtrar_productos = _entry_point(handlers.filtrar_productos)
buscar_productos = _entry_point(handlers.buscar_productos)
buscar_por_categoria = _entry_point(handlers.buscar_por_categoria)
buscar_por_subcategoria = _entry_point(handlers.buscar_por_subcategoria)
obtener_categorias = _entry_point(handlers.obtener_categorias)
obtener_subcategorias = _entry_point(handlers.obtener_subcategorias)
obtener_estadisticas = _entry_point(handlers.obtener_estadisticas)
