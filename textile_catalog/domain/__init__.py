"""Domain layer: catalog entities, errors and the hierarchy selector."""

from textile_catalog.domain.entities import (
    AppUser,
    Category,
    ColorVariant,
    FabricType,
    Product,
    ProductDraft,
    Role,
    Subcategory,
    UserRecord,
    resolve_timestamp,
)
from textile_catalog.domain.exceptions import (
    DomainError,
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ShareUnavailableError,
    TransportError,
    ValidationError,
)
from textile_catalog.domain.selector import (
    HierarchySelection,
    HierarchySelector,
    SelectorState,
)

__all__ = [
    # Entities
    "AppUser",
    "Category",
    "ColorVariant",
    "FabricType",
    "Product",
    "ProductDraft",
    "Role",
    "Subcategory",
    "UserRecord",
    "resolve_timestamp",
    # Errors
    "DomainError",
    "InvalidStateTransitionError",
    "NotFoundError",
    "PermissionDeniedError",
    "ShareUnavailableError",
    "TransportError",
    "ValidationError",
    # Selector
    "HierarchySelection",
    "HierarchySelector",
    "SelectorState",
]
