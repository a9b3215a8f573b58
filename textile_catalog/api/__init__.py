"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from textile_catalog.api.health import router as health_router
from textile_catalog.api.products import router as products_router
from textile_catalog.api.share import router as share_router
from textile_catalog.api.taxonomy import router as taxonomy_router
from textile_catalog.api.variants import router as variants_router

__all__ = [
    "health_router",
    "products_router",
    "share_router",
    "taxonomy_router",
    "variants_router",
]
