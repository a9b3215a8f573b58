"""Application layer module.

Contains application services (use cases) that orchestrate the catalog
store, blob store and identity backends.
"""

from textile_catalog.application.auth_service import AuthService, get_auth_service
from textile_catalog.application.images import ImageUpload, ImageUrlResolver
from textile_catalog.application.product_service import (
    ProductForm,
    ProductService,
    get_product_service,
)
from textile_catalog.application.share_service import (
    ShareService,
    ShareTarget,
    get_share_service,
)
from textile_catalog.application.variant_service import (
    VariantForm,
    VariantService,
    get_variant_service,
)

__all__ = [
    "AuthService",
    "get_auth_service",
    "ImageUpload",
    "ImageUrlResolver",
    "ProductForm",
    "ProductService",
    "get_product_service",
    "ShareService",
    "ShareTarget",
    "get_share_service",
    "VariantForm",
    "VariantService",
    "get_variant_service",
]
