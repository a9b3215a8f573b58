"""API schemas for the catalog API.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from textile_catalog.catalog.query import ProductFilter, SortMode
from textile_catalog.domain.entities import ColorVariant, Product, Role


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict | list = Field(
        default_factory=dict, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class UserResponse(BaseModel):
    """Signed-in user."""

    uid: str
    email: str | None = None
    role: Role
    is_admin: bool


# ============================================================================
# Taxonomy Schemas
# ============================================================================


class CategoryResponse(BaseModel):
    id: str
    name: str


class SubcategoryResponse(BaseModel):
    id: str
    name: str
    category_id: str


class FabricTypeResponse(BaseModel):
    id: str
    name: str
    subcategory_id: str


class CategoryCreateRequest(BaseModel):
    """Request to create a category."""

    name: str = Field(..., description="Category name")


class SubcategoryCreateRequest(BaseModel):
    """Request to create a sub-category."""

    name: str = Field(..., description="Sub-category name")
    category_id: str = Field(..., description="Parent category")


class FabricTypeCreateRequest(BaseModel):
    """Request to create a fabric type."""

    name: str = Field(..., description="Fabric type name")
    subcategory_id: str = Field(..., description="Parent sub-category")


class CreatedResponse(BaseModel):
    id: str = Field(..., description="Identifier of the new document")


class DeleteResponse(BaseModel):
    """Result of a hard delete.

    Children are never cascaded; ``warning`` says what may be orphaned.
    """

    id: str
    deleted: bool = True
    warning: str


# ============================================================================
# Product Schemas
# ============================================================================


class ColorVariantSchema(BaseModel):
    """Embedded color variant."""

    id: str
    color_name: str
    variant_sku: str | None = None
    image_path: str
    image_url: str | None = Field(default=None, description="Resolved download URL")
    is_active: bool
    notes: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_variant(
        cls, variant: ColorVariant, image_url: str | None = None
    ) -> "ColorVariantSchema":
        return cls(
            id=variant.id,
            color_name=variant.color_name,
            variant_sku=variant.variant_sku,
            image_path=variant.image_path,
            image_url=image_url,
            is_active=variant.is_active,
            notes=variant.notes,
            created_at=variant.created_at,
        )


class ProductSummary(BaseModel):
    """Product as shown in the listing."""

    id: str
    sku: str
    category_id: str
    subcategory_id: str
    fabric_type_id: str
    price: float
    main_image_path: str
    main_image_url: str | None = None
    description: str | None = None
    panno: str | None = None
    variant_count: int
    color_names: list[str]
    created_at: datetime | None = None

    @classmethod
    def from_product(cls, product: Product, main_image_url: str | None = None) -> "ProductSummary":
        return cls(
            id=product.id or "",
            sku=product.sku,
            category_id=product.category_id,
            subcategory_id=product.subcategory_id,
            fabric_type_id=product.fabric_type_id,
            price=product.price,
            main_image_path=product.main_image_path,
            main_image_url=main_image_url,
            description=product.description,
            panno=product.panno,
            variant_count=len(product.color_variants),
            color_names=[v.color_name for v in product.color_variants],
            created_at=product.created_at,
        )


class FiltersSchema(BaseModel):
    """Listing filters and sort mode."""

    category_id: str | None = None
    subcategory_id: str | None = None
    fabric_type_id: str | None = None
    color_search: str = ""
    sort_mode: SortMode = SortMode.RECENT

    @classmethod
    def from_filter(cls, filters: ProductFilter) -> "FiltersSchema":
        return cls(
            category_id=filters.category_id,
            subcategory_id=filters.subcategory_id,
            fabric_type_id=filters.fabric_type_id,
            color_search=filters.color_search,
            sort_mode=filters.sort_mode,
        )

    def to_filter(self) -> ProductFilter:
        return ProductFilter(
            category_id=self.category_id or None,
            subcategory_id=self.subcategory_id or None,
            fabric_type_id=self.fabric_type_id or None,
            color_search=self.color_search,
            sort_mode=self.sort_mode,
        )


class ProductListResponse(BaseModel):
    """Filtered, sorted listing with the dependent dropdown options."""

    items: list[ProductSummary]
    total: int = Field(..., description="Products before filtering")
    matched: int = Field(..., description="Products after filtering")
    filters: FiltersSchema
    subcategories: list[SubcategoryResponse] = Field(
        default_factory=list, description="Options under the selected category"
    )
    fabric_types: list[FabricTypeResponse] = Field(
        default_factory=list, description="Options under the selected sub-category"
    )


class ProductDetailResponse(BaseModel):
    """Product with resolved image URLs."""

    product: ProductSummary
    color_variants: list[ColorVariantSchema]
    category_name: str | None = None
    subcategory_name: str | None = None
    fabric_type_name: str | None = None
    created_by: str
    updated_at: datetime | None = None


class ProductCreateResponse(BaseModel):
    id: str
    main_image_path: str


class VariantSaveResponse(BaseModel):
    variant_id: str
    image_path: str | None = None


# ============================================================================
# Share Schemas
# ============================================================================


class ShareRequest(BaseModel):
    """Variants to share, by id."""

    variant_ids: list[str] = Field(..., description="Selected variant ids")


class ShareResponse(BaseModel):
    """Share message and the deep link to open."""

    channel: str
    message: str
    link: str | None = None
    attachments: list[str] = Field(default_factory=list)
    notice: str | None = None
