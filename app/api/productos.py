"""Product catalog HTTP routes.

Each route turns the Starlette request into a handler event, runs the matching
catalog handler and sends its response back unchanged.
"""

from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, Response

from app.api import handlers
from app.api.handlers import Handler
from app.application.context import CatalogContext, get_context

router = APIRouter(tags=["Productos"])


def get_catalog_context() -> CatalogContext:
    """Dependency returning the process-wide catalog context."""
    return get_context()


async def build_event(request: Request) -> dict[str, Any]:
    """Build a handler event from an HTTP request.

    Path parameters are re-quoted since the router already decoded them and
    handlers decode exactly once.
    """
    body = await request.body()
    path_params = {name: quote(value, safe="") for name, value in request.path_params.items()}

    return {
        "httpMethod": request.method,
        "requestPath": request.url.path,
        "pathParameters": path_params or None,
        "queryStringParameters": dict(request.query_params) or None,
        "headers": dict(request.headers),
        "body": body or None,
    }


def to_response(result: dict[str, Any]) -> Response:
    """Convert a handler response dict into a Starlette response."""
    return Response(
        content=result["body"],
        status_code=result["statusCode"],
        headers=result["headers"],
    )


def _endpoint(handler: Handler):
    async def endpoint(
        request: Request,
        ctx: CatalogContext = Depends(get_catalog_context),
    ) -> Response:
        event = await build_event(request)
        return to_response(await handler(event, ctx))

    endpoint.__name__ = handler.__name__
    endpoint.__doc__ = handler.__doc__
    return endpoint


# Static segments go before /productos/{codigo}
ROUTES = (
    ("/productos", ["GET"], handlers.listar_productos),
    ("/productos", ["POST"], handlers.crear_producto),
    ("/productos/filtrar", ["GET"], handlers.filtrar_productos),
    ("/productos/buscar", ["GET"], handlers.buscar_productos),
    ("/productos/buscar/{codigo}", ["GET"], handlers.buscar_producto),
    ("/productos/estadisticas", ["GET"], handlers.obtener_estadisticas),
    ("/productos/categorias", ["GET"], handlers.obtener_categorias),
    ("/productos/categorias/{categoria}/subcategorias", ["GET"], handlers.obtener_subcategorias),
    ("/productos/categoria/{categoria}", ["GET"], handlers.buscar_por_categoria),
    ("/productos/subcategoria", ["POST"], handlers.buscar_por_subcategoria),
    ("/productos/subcategoria/{subcategoria}", ["GET", "POST"], handlers.buscar_por_subcategoria),
    ("/productos/{codigo}", ["PUT"], handlers.modificar_producto),
    ("/productos/{codigo}", ["DELETE"], handlers.eliminar_producto),
)

for path, methods, handler in ROUTES:
    router.add_api_route(
        path,
        _endpoint(handler),
        methods=methods,
        response_class=Response,
        name=f"{handler.__name__}_{'_'.join(methods).lower()}",
    )
