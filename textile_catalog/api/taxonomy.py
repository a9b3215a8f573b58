"""Taxonomy API endpoints.

Provides the category → sub-category → fabric type hierarchy:
- GET lists of active entries for any signed-in user
- POST/DELETE for admins only

Deletes are hard and never cascade; the response says what may be left
orphaned.
"""

from fastapi import APIRouter, status

from textile_catalog.api.dependencies import AdminUser, CurrentUser, Store
from textile_catalog.api.schemas import (
    CategoryCreateRequest,
    CategoryResponse,
    CreatedResponse,
    DeleteResponse,
    ErrorResponse,
    FabricTypeCreateRequest,
    FabricTypeResponse,
    SubcategoryCreateRequest,
    SubcategoryResponse,
)

router = APIRouter(tags=["Taxonomy"])

CATEGORY_DELETE_WARNING = (
    "Delete this category? Sub-categories/fabrics linked will become orphaned."
)
SUBCATEGORY_DELETE_WARNING = "Delete this sub-category? Linked fabric types may be orphaned."
FABRIC_TYPE_DELETE_WARNING = "Delete this fabric type?"

ADMIN_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


# ============================================================================
# Reads
# ============================================================================


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(user: CurrentUser, store: Store) -> list[CategoryResponse]:
    """List active categories."""
    return [CategoryResponse(id=c.id, name=c.name) for c in await store.list_categories()]


@router.get(
    "/categories/{category_id}/subcategories",
    response_model=list[SubcategoryResponse],
)
async def list_subcategories(
    category_id: str, user: CurrentUser, store: Store
) -> list[SubcategoryResponse]:
    """List active sub-categories of a category."""
    return [
        SubcategoryResponse(id=s.id, name=s.name, category_id=s.category_id)
        for s in await store.list_subcategories(category_id)
    ]


@router.get(
    "/subcategories/{subcategory_id}/fabric-types",
    response_model=list[FabricTypeResponse],
)
async def list_fabric_types(
    subcategory_id: str, user: CurrentUser, store: Store
) -> list[FabricTypeResponse]:
    """List active fabric types of a sub-category."""
    return [
        FabricTypeResponse(id=f.id, name=f.name, subcategory_id=f.subcategory_id)
        for f in await store.list_fabric_types(subcategory_id)
    ]


# ============================================================================
# Admin mutations
# ============================================================================


@router.post(
    "/categories",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ADMIN_RESPONSES,
)
async def create_category(
    request: CategoryCreateRequest, admin: AdminUser, store: Store
) -> CreatedResponse:
    """Create an active category."""
    return CreatedResponse(id=await store.add_category(request.name))


@router.post(
    "/subcategories",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ADMIN_RESPONSES,
)
async def create_subcategory(
    request: SubcategoryCreateRequest, admin: AdminUser, store: Store
) -> CreatedResponse:
    """Create an active sub-category under a category."""
    return CreatedResponse(
        id=await store.add_subcategory(request.name, request.category_id)
    )


@router.post(
    "/fabric-types",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ADMIN_RESPONSES,
)
async def create_fabric_type(
    request: FabricTypeCreateRequest, admin: AdminUser, store: Store
) -> CreatedResponse:
    """Create an active fabric type under a sub-category."""
    return CreatedResponse(
        id=await store.add_fabric_type(request.name, request.subcategory_id)
    )


@router.delete(
    "/categories/{category_id}", response_model=DeleteResponse, responses=ADMIN_RESPONSES
)
async def delete_category(category_id: str, admin: AdminUser, store: Store) -> DeleteResponse:
    await store.delete_category(category_id)
    return DeleteResponse(id=category_id, warning=CATEGORY_DELETE_WARNING)


@router.delete(
    "/subcategories/{subcategory_id}", response_model=DeleteResponse, responses=ADMIN_RESPONSES
)
async def delete_subcategory(
    subcategory_id: str, admin: AdminUser, store: Store
) -> DeleteResponse:
    await store.delete_subcategory(subcategory_id)
    return DeleteResponse(id=subcategory_id, warning=SUBCATEGORY_DELETE_WARNING)


@router.delete(
    "/fabric-types/{fabric_type_id}", response_model=DeleteResponse, responses=ADMIN_RESPONSES
)
async def delete_fabric_type(
    fabric_type_id: str, admin: AdminUser, store: Store
) -> DeleteResponse:
    await store.delete_fabric_type(fabric_type_id)
    return DeleteResponse(id=fabric_type_id, warning=FABRIC_TYPE_DELETE_WARNING)
