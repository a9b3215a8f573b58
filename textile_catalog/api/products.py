"""Product API endpoints.

Provides:
- GET /products - filtered, sorted listing
- GET/PUT/DELETE /products/filters - the caller's saved listing filters
- POST /products - create product with main image (multipart)
- GET /products/{id} - product detail with image URLs
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status

from textile_catalog.api.dependencies import (
    CurrentUser,
    Store,
    get_filter_state,
    get_request_id,
    raise_for_result,
    to_image_upload,
)
from textile_catalog.api.schemas import (
    ColorVariantSchema,
    ErrorResponse,
    FabricTypeResponse,
    FiltersSchema,
    ProductCreateResponse,
    ProductDetailResponse,
    ProductListResponse,
    ProductSummary,
    SubcategoryResponse,
)
from textile_catalog.application.images import ImageUrlResolver
from textile_catalog.application.product_service import (
    ProductForm,
    ProductService,
    get_product_service,
)
from textile_catalog.catalog.filter_state import FilterStateStore
from textile_catalog.catalog.query import ProductFilter, SortMode, apply_query
from textile_catalog.domain.selector import HierarchySelector
from textile_catalog.infrastructure.backends import get_blob_store

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> ProductService:
    """Get product service with request ID."""
    return get_product_service(request_id=get_request_id(request))


FilterState = Annotated[FilterStateStore, Depends(get_filter_state)]


# ============================================================================
# Listing
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="List products",
)
async def list_products(
    user: CurrentUser,
    store: Store,
    filter_state: FilterState,
    category_id: Annotated[str | None, Query()] = None,
    subcategory_id: Annotated[str | None, Query()] = None,
    fabric_type_id: Annotated[str | None, Query()] = None,
    color_search: Annotated[str | None, Query()] = None,
    sort_mode: Annotated[SortMode | None, Query()] = None,
) -> ProductListResponse:
    """List products through the saved filters.

    Each supplied parameter acts like changing that dropdown: picking a
    category clears the levels below it unless they are supplied too, and
    an empty value clears the level. Omitted parameters keep their saved
    value. The resulting filters are saved for the next call.
    """
    saved = filter_state.load()

    selector = HierarchySelector(store.list_subcategories, store.list_fabric_types)
    await selector.restore(saved.category_id, saved.subcategory_id, saved.fabric_type_id)
    if category_id is not None:
        await selector.select_category(category_id)
    if subcategory_id is not None:
        await selector.select_subcategory(subcategory_id)
    if fabric_type_id is not None:
        selector.select_fabric_type(fabric_type_id)

    selection = selector.snapshot()
    filters = ProductFilter.from_selection(
        selection,
        color_search=saved.color_search if color_search is None else color_search,
        sort_mode=sort_mode or saved.sort_mode,
    )
    filter_state.save(filters)

    result = apply_query(await store.list_products(), filters)

    images = ImageUrlResolver(get_blob_store())
    items = [
        ProductSummary.from_product(p, await images.resolve_main_image(p))
        for p in result.items
    ]
    return ProductListResponse(
        items=items,
        total=result.total,
        matched=result.matched,
        filters=FiltersSchema.from_filter(filters),
        subcategories=[
            SubcategoryResponse(id=s.id, name=s.name, category_id=s.category_id)
            for s in selection.subcategories
        ],
        fabric_types=[
            FabricTypeResponse(id=f.id, name=f.name, subcategory_id=f.subcategory_id)
            for f in selection.fabric_types
        ],
    )


@router.get("/filters", response_model=FiltersSchema, summary="Get saved filters")
async def get_filters(filter_state: FilterState) -> FiltersSchema:
    return FiltersSchema.from_filter(filter_state.load())


@router.put("/filters", response_model=FiltersSchema, summary="Replace saved filters")
async def put_filters(request: FiltersSchema, filter_state: FilterState) -> FiltersSchema:
    filters = request.to_filter()
    filter_state.save(filters)
    return FiltersSchema.from_filter(filters)


@router.delete("/filters", response_model=FiltersSchema, summary="Clear saved filters")
async def clear_filters(filter_state: FilterState) -> FiltersSchema:
    """Reset the filters; the sort mode is kept."""
    return FiltersSchema.from_filter(filter_state.clear())


# ============================================================================
# Create / detail
# ============================================================================


@router.post(
    "",
    response_model=ProductCreateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Create product",
)
async def create_product(
    user: CurrentUser,
    service: Annotated[ProductService, Depends(get_service)],
    sku: Annotated[str, Form()] = "",
    category_id: Annotated[str, Form()] = "",
    subcategory_id: Annotated[str, Form()] = "",
    fabric_type_id: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    panno: Annotated[str, Form()] = "",
    price: Annotated[float, Form()] = 0,
    main_image: Annotated[UploadFile | None, File()] = None,
) -> ProductCreateResponse:
    """Create a product and upload its main image.

    Raises:
        HTTPException: If validation fails or a backend call fails.
    """
    form = ProductForm(
        sku=sku,
        category_id=category_id,
        subcategory_id=subcategory_id,
        fabric_type_id=fabric_type_id,
        description=description,
        panno=panno,
        price=price,
    )
    result = await service.create_product(form, await to_image_upload(main_image), user)

    if not result.success or not result.product_id:
        raise_for_result(result.error_code, result.error, "Failed to create product")

    return ProductCreateResponse(
        id=result.product_id, main_image_path=result.main_image_path or ""
    )


@router.get(
    "/{product_id}",
    response_model=ProductDetailResponse,
    responses={404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Get product detail",
)
async def get_product(
    product_id: str,
    user: CurrentUser,
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductDetailResponse:
    """Get a product with resolved image URLs.

    Raises:
        HTTPException: If the product does not exist.
    """
    result = await service.get_product_detail(product_id)
    if not result.success or not result.detail:
        raise_for_result(result.error_code, result.error, "Failed to load product")

    detail = result.detail
    product = detail.product
    return ProductDetailResponse(
        product=ProductSummary.from_product(product, detail.main_image_url),
        color_variants=[
            ColorVariantSchema.from_variant(v, detail.variant_image_urls.get(v.id))
            for v in product.color_variants
        ],
        category_name=detail.category_name,
        subcategory_name=detail.subcategory_name,
        fabric_type_name=detail.fabric_type_name,
        created_by=product.created_by,
        updated_at=product.updated_at,
    )
