"""Application layer module.

Wires settings, store backend and taxonomy into the context the handlers use.
"""

from app.application.context import CatalogContext, build_context, get_context, set_context

__all__ = [
    "CatalogContext",
    "build_context",
    "get_context",
    "set_context",
]
