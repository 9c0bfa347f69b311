"""Product catalog handlers.

One coroutine per catalog operation. Each takes a gateway-style request event
and a CatalogContext and returns a response dictionary (see
app.api.responses). The shared envelope is:

    authenticate -> tenant_id -> parse/validate -> store -> respond

Handlers are registered in HANDLERS so integrations can dispatch by name.
"""

import functools
import re
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from app.api.auth import Principal, authenticate
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
from app.api.responses import (
    error_response,
    internal_error_response,
    json_response,
    parse_json_body,
)
from app.application.context import CatalogContext
from app.catalog.service import SORT_OPTIONS
from app.catalog.store import ProductFilter, QueryOptions, decode_cursor, encode_cursor
from app.domain.exceptions import (
    CatalogError,
    CategoryNotFoundError,
    InvalidBodyError,
    MissingPathParameterError,
    ProductAlreadyExistsError,
    ValidationError,
)

logger = structlog.get_logger()

Event = dict[str, Any]
Response = dict[str, Any]
Handler = Callable[[Event, CatalogContext], Awaitable[Response]]

MIN_SEARCH_LENGTH = 2
SEARCH_SUGGESTIONS = [
    "Revisa la ortografía del término de búsqueda",
    "Intenta con términos más generales",
    "Busca por categoría como 'vitaminas', 'analgésicos', etc.",
    "Prueba con el nombre del laboratorio",
]

HANDLERS: dict[str, Handler] = {}


def catalog_handler(
    func: Callable[[Event, CatalogContext, Principal], Awaitable[Response]],
) -> Handler:
    """Wrap a handler body with authentication and error mapping.

    Catalog errors become their status code with {"error": message}; anything
    else is logged and answered with a generic 500.
    """

    @functools.wraps(func)
    async def wrapper(event: Event, ctx: CatalogContext) -> Response:
        tenant_id = None
        try:
            principal = authenticate(event, ctx.settings)
            tenant_id = principal.tenant_id
            return await func(event, ctx, principal)
        except CatalogError as e:
            logger.info(
                "Request rejected",
                handler=func.__name__,
                tenant_id=tenant_id,
                status_code=e.status_code,
                error=e.message,
            )
            return error_response(e)
        except Exception:
            logger.exception("Unhandled error in handler", handler=func.__name__, tenant_id=tenant_id)
            return internal_error_response()

    HANDLERS[func.__name__] = wrapper
    return wrapper


def _require_path_param(
    event: Event,
    name: str,
    pattern: re.Pattern[str],
    message: str,
    details: dict[str, Any] | None = None,
) -> str:
    value = extract_path_param(event, name, pattern)
    if not value:
        raise MissingPathParameterError(message, details)
    return value


def _paginacion(pagina: int, limite: int, last_key: dict[str, Any] | None) -> dict[str, Any]:
    return {
        "pagina_actual": pagina,
        "limite": limite,
        "hay_mas": last_key is not None,
        "nextKey": encode_cursor(last_key),
    }


# ============================================================================
# CRUD
# ============================================================================


@catalog_handler
async def listar_productos(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """GET /productos: newest-first page of the tenant's products."""
    params = query_params(event)
    limit = query_int(params, "limit", default=ctx.settings.default_page_size)
    start_key = decode_cursor(params.get("lastKey"))

    page = await ctx.service.list_products(
        principal.tenant_id,
        QueryOptions(limit=limit, start_key=start_key),
    )
    return json_response(200, {
        "productos": [p.to_dict() for p in page.items],
        "count": len(page.items),
        "nextKey": encode_cursor(page.last_key),
        "hasMore": page.has_more,
    })


@catalog_handler
async def crear_producto(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """POST /productos: validate and store a new product."""
    body = parse_json_body(event)
    try:
        producto = await ctx.service.create_product(principal.tenant_id, body)
    except ProductAlreadyExistsError:
        logger.error("Could not generate a free product code", tenant_id=principal.tenant_id)
        return internal_error_response()

    return json_response(201, {
        "message": "Producto creado exitosamente",
        "producto": producto.to_dict(),
    })


@catalog_handler
async def buscar_producto(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """GET /productos/buscar/{codigo}: point lookup."""
    codigo = _require_path_param(
        event, "codigo", CODIGO_BUSCAR_PATTERN, "Código de producto requerido"
    )
    producto = await ctx.service.get_product(principal.tenant_id, codigo)
    return json_response(200, {"producto": producto.to_dict()})


@catalog_handler
async def modificar_producto(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """PUT /productos/{codigo}: partial update."""
    codigo = _require_path_param(event, "codigo", CODIGO_PATTERN, "Código de producto requerido")
    body = parse_json_body(event)

    producto = await ctx.service.update_product(principal.tenant_id, codigo, body)
    return json_response(200, {
        "message": "Producto modificado exitosamente",
        "producto": producto.to_dict(),
    })


@catalog_handler
async def eliminar_producto(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """DELETE /productos/{codigo}: hard delete."""
    codigo = _require_path_param(event, "codigo", CODIGO_PATTERN, "Código de producto requerido")

    producto = await ctx.service.delete_product(principal.tenant_id, codigo)
    return json_response(200, {
        "message": "Producto eliminado exitosamente",
        "producto_eliminado": producto.to_dict(),
    })


# ============================================================================
# Queries
# ============================================================================


@catalog_handler
async def filtrar_productos(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """GET /productos/filtrar: composite filter with pagination."""
    params = query_params(event)

    categoria = params.get("categoria") or None
    subcategoria = params.get("subcategoria") or None
    laboratorio = params.get("laboratorio") or None
    search = params.get("search") or None
    requiere_receta = params.get("requiere_receta")
    precio_min = query_float(params, "precio_min")
    precio_max = query_float(params, "precio_max")

    limit = query_int(params, "limit", default=ctx.settings.default_page_size)
    start_key = decode_cursor(params.get("lastKey"))

    filters = ProductFilter(
        categoria=categoria,
        subcategoria=subcategoria,
        laboratorio=laboratorio,
        requiere_receta=(requiere_receta == "true") if requiere_receta is not None else None,
        precio_min=precio_min,
        precio_max=precio_max,
        search=search,
    )
    page = await ctx.service.list_products(
        principal.tenant_id,
        QueryOptions(limit=limit, start_key=start_key, filter=filters),
    )

    return json_response(200, {
        "productos": [p.to_dict() for p in page.items],
        "count": len(page.items),
        "nextKey": encode_cursor(page.last_key),
        "hasMore": page.has_more,
        "filtros_aplicados": {
            "categoria": categoria,
            "subcategoria": subcategoria,
            "laboratorio": laboratorio,
            "requiere_receta": requiere_receta,
            "precio_min": precio_min,
            "precio_max": precio_max,
            "search": search,
        },
    })


@catalog_handler
async def buscar_productos(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """GET /productos/buscar: term search ranked inside the returned page."""
    params = query_params(event)

    termino = query_value(params, "q", "search", "termino")
    if not termino or len(termino.strip()) < MIN_SEARCH_LENGTH:
        raise ValidationError(
            "Término de búsqueda requerido (mínimo 2 caracteres)",
            details={"ejemplo": "/productos/buscar?q=penicilina&limite=20&pagina=1"},
        )
    termino = termino.strip().lower()

    limite = query_int(params, "limite", "limit", default=ctx.settings.default_page_size)
    pagina = query_int(params, "pagina", "page", default=1)
    start_key = decode_cursor(query_value(params, "nextKey", "lastKey"))

    result = await ctx.service.search_products(
        principal.tenant_id,
        termino,
        limit=limite,
        start_key=start_key,
        criterio=params.get("ordenar") or "relevancia",
    )
    productos = [r.to_dict() for r in result.results]

    return json_response(200, {
        "productos": productos,
        "count": len(productos),
        "termino_buscado": termino,
        "paginacion": _paginacion(pagina, limite, result.last_key),
        "ordenamiento": {
            "criterio": result.criterio,
            "opciones": list(SORT_OPTIONS),
        },
        "sugerencias": SEARCH_SUGGESTIONS if not productos else None,
    })


async def _browse(
    ctx: CatalogContext,
    principal: Principal,
    params: dict[str, str],
    filters: ProductFilter,
) -> tuple[list[dict[str, Any]], dict[str, Any]]:
    limite = query_int(params, "limite", "limit", default=ctx.settings.default_page_size)
    pagina = query_int(params, "pagina", "page", default=1)
    start_key = decode_cursor(query_value(params, "nextKey", "lastKey"))

    page = await ctx.service.list_products(
        principal.tenant_id,
        QueryOptions(limit=limite, start_key=start_key, filter=filters),
    )
    return [p.to_dict() for p in page.items], _paginacion(pagina, limite, page.last_key)


@catalog_handler
async def buscar_por_categoria(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """GET /productos/categoria/{categoria}: active products of one category."""
    categoria = _require_path_param(
        event,
        "categoria",
        CATEGORIA_PATTERN,
        "Categoría requerida en el path",
        {"ejemplo": "/productos/categoria/Analgésicos"},
    )

    productos, paginacion = await _browse(
        ctx, principal, query_params(event), ProductFilter(categoria=categoria, activo=True)
    )
    return json_response(200, {
        "productos": productos,
        "count": len(productos),
        "categoria_buscada": categoria,
        "paginacion": paginacion,
    })


@catalog_handler
async def buscar_por_subcategoria(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """GET/POST /productos/subcategoria/{subcategoria}: active products of one subcategory.

    A JSON body with "subcategoria" takes priority over the path.
    """
    subcategoria = None
    try:
        body = parse_json_body(event)
    except InvalidBodyError:
        body = {}
    if isinstance(body.get("subcategoria"), str) and body["subcategoria"].strip():
        subcategoria = body["subcategoria"].strip()

    if subcategoria is None:
        subcategoria = _require_path_param(
            event,
            "subcategoria",
            SUBCATEGORIA_PATTERN,
            "Subcategoría requerida en el path o body",
            {
                "ejemplo_path": "/productos/subcategoria/Leches%20de%20Fórmula",
                "ejemplo_body": '{"subcategoria": "Leches de Fórmula"}',
            },
        )

    productos, paginacion = await _browse(
        ctx, principal, query_params(event), ProductFilter(subcategoria=subcategoria, activo=True)
    )
    return json_response(200, {
        "productos": productos,
        "count": len(productos),
        "subcategoria_buscada": subcategoria,
        "paginacion": paginacion,
    })


# ============================================================================
# Taxonomy and statistics
# ============================================================================


@catalog_handler
async def obtener_categorias(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """GET /productos/categorias: the whole taxonomy."""
    return json_response(200, {
        "categorias": ctx.taxonomy.as_dict(),
        "total_categorias": len(ctx.taxonomy),
    })


@catalog_handler
async def obtener_subcategorias(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """GET /productos/categorias/{categoria}/subcategorias."""
    categoria = _require_path_param(
        event, "categoria", SUBCATEGORIAS_DE_CATEGORIA_PATTERN, "Categoría requerida"
    )

    subcategorias = ctx.taxonomy.get_subcategories(categoria)
    if subcategorias is None:
        raise CategoryNotFoundError(categoria, ctx.taxonomy.categories)

    return json_response(200, {
        "categoria": categoria,
        "subcategorias": subcategorias,
        "total": len(subcategorias),
    })


@catalog_handler
async def obtener_estadisticas(event: Event, ctx: CatalogContext, principal: Principal) -> Response:
    """GET /productos/estadisticas: aggregates over every product of the tenant."""
    stats = await ctx.service.statistics(principal.tenant_id)
    return json_response(200, stats)
