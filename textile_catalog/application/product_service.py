"""Product creation and product detail."""

from dataclasses import dataclass, field

import structlog

from textile_catalog.application.images import ImageUpload, ImageUrlResolver, upload_image
from textile_catalog.catalog.paths import main_image_path
from textile_catalog.catalog.store import CatalogStore, get_catalog_store
from textile_catalog.domain.entities import AppUser, Product, ProductDraft
from textile_catalog.domain.exceptions import NotFoundError, TransportError, ValidationError
from textile_catalog.domain.selector import HierarchySelector
from textile_catalog.infrastructure.backends import get_blob_store
from textile_catalog.infrastructure.blob_store import BlobStore
from textile_catalog.infrastructure.document_store import Clock, utc_now

logger = structlog.get_logger()


# ============================================================================
# Data Transfer Objects
# ============================================================================


@dataclass
class ProductForm:
    """Product creation form fields."""

    sku: str
    category_id: str
    subcategory_id: str
    fabric_type_id: str
    description: str = ""
    panno: str = ""
    price: float = 0


@dataclass
class CreateProductResult:
    """Result of product creation."""

    product_id: str | None = None
    main_image_path: str | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class ProductDetail:
    """A product with resolved image URLs and taxonomy names.

    Attributes:
        product: The stored product.
        main_image_url: Download URL of the main image, if it resolved.
        variant_image_urls: Variant id to download URL, for the variants
            whose image resolved.
        category_name: Name of the product's category, if found.
        subcategory_name: Name of the product's subcategory, if found.
        fabric_type_name: Name of the product's fabric type, if found.
    """

    product: Product
    main_image_url: str | None = None
    variant_image_urls: dict[str, str] = field(default_factory=dict)
    category_name: str | None = None
    subcategory_name: str | None = None
    fabric_type_name: str | None = None


@dataclass
class GetProductResult:
    """Result of loading a product detail."""

    detail: ProductDetail | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None


# ============================================================================
# Product Service
# ============================================================================


class ProductService:
    """Creates products and loads product detail views.

    Creation is a three-step sequence: write the product with an empty
    ``mainImagePath``, upload the main image under the new id, then point
    the product at the upload. A failure after the first step leaves the
    product without a main image.
    """

    def __init__(
        self,
        store: CatalogStore,
        blobs: BlobStore,
        request_id: str | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize service.

        Args:
            store: Catalog store client.
            blobs: Blob store for product images.
            request_id: Request ID for correlation.
            clock: Source of upload timestamps.
        """
        self.store = store
        self.blobs = blobs
        self.request_id = request_id
        self._clock = clock
        self.images = ImageUrlResolver(blobs)

    def new_selector(self) -> HierarchySelector:
        """Hierarchy selector backed by this store, for the creation form."""
        return HierarchySelector(self.store.list_subcategories, self.store.list_fabric_types)

    @staticmethod
    def _validate(
        form: ProductForm, image: ImageUpload | None, user: AppUser | None
    ) -> tuple[ImageUpload, AppUser]:
        if user is None:
            raise ValidationError("You must be logged in")
        if image is None:
            raise ValidationError("Please select a main product image", field="mainImage")
        required = (form.sku, form.category_id, form.subcategory_id, form.fabric_type_id)
        if not all(value and value.strip() for value in required):
            raise ValidationError("Please fill in all required fields")
        image.validate()
        return image, user

    async def create_product(
        self,
        form: ProductForm,
        image: ImageUpload | None,
        user: AppUser | None,
    ) -> CreateProductResult:
        """Create a product with its main image.

        ``description`` is stored only when non-blank. ``panno`` is stored
        only when non-blank and the chosen category is Embroidery.

        Args:
            form: Product fields.
            image: Main product image; required.
            user: Signed-in creator; required.

        Returns:
            CreateProductResult with the new product id.
        """
        try:
            image, user = self._validate(form, image, user)

            category = await self.store.get_category(form.category_id)
            panno = form.panno.strip()
            if not (category and category.is_embroidery):
                panno = ""

            draft = ProductDraft(
                sku=form.sku.strip(),
                category_id=form.category_id,
                subcategory_id=form.subcategory_id,
                fabric_type_id=form.fabric_type_id,
                price=form.price,
                main_image_path="",
                color_variants=[],
                created_by=user.uid,
                description=form.description.strip() or None,
                panno=panno or None,
            )
            product_id = await self.store.create_product(draft)

            path = await upload_image(
                self.blobs,
                main_image_path(product_id, image.filename, self._clock()),
                image,
            )
            await self.store.set_main_image_path(product_id, path)

            logger.info(
                "Product created with main image",
                product_id=product_id,
                sku=draft.sku,
                request_id=self.request_id,
            )
            return CreateProductResult(product_id=product_id, main_image_path=path)

        except ValidationError as e:
            return CreateProductResult(
                success=False, error=e.message, error_code="VALIDATION_ERROR"
            )
        except Exception as e:
            logger.error(
                "Failed to create product",
                sku=form.sku,
                error=str(e),
                request_id=self.request_id,
            )
            return CreateProductResult(
                success=False,
                error=f"Failed to create product: {e}",
                error_code="TRANSPORT_ERROR" if isinstance(e, TransportError) else "CREATE_FAILED",
            )

    async def _taxonomy_names(self, detail: ProductDetail) -> None:
        product = detail.product
        try:
            for category in await self.store.list_categories():
                if category.id == product.category_id:
                    detail.category_name = category.name
            if product.category_id:
                for sub in await self.store.list_subcategories(product.category_id):
                    if sub.id == product.subcategory_id:
                        detail.subcategory_name = sub.name
            if product.subcategory_id:
                for fabric in await self.store.list_fabric_types(product.subcategory_id):
                    if fabric.id == product.fabric_type_id:
                        detail.fabric_type_name = fabric.name
        except TransportError as e:
            logger.warning(
                "Failed to load taxonomy names",
                product_id=product.id,
                error=str(e),
                request_id=self.request_id,
            )

    async def get_product_detail(self, product_id: str) -> GetProductResult:
        """Load a product with its image URLs and taxonomy names.

        Image URLs resolve independently; one that fails is left out
        without affecting the others.

        Args:
            product_id: Product to load.

        Returns:
            GetProductResult with the detail view.
        """
        try:
            product = await self.store.get_product(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)

            detail = ProductDetail(product=product)
            detail.main_image_url = await self.images.resolve_main_image(product)
            detail.variant_image_urls = await self.images.resolve_variant_images(product)
            await self._taxonomy_names(detail)
            return GetProductResult(detail=detail)

        except NotFoundError as e:
            return GetProductResult(
                success=False, error=e.message, error_code="PRODUCT_NOT_FOUND"
            )
        except TransportError as e:
            logger.error(
                "Failed to load product",
                product_id=product_id,
                error=str(e),
                request_id=self.request_id,
            )
            return GetProductResult(
                success=False, error=str(e), error_code="TRANSPORT_ERROR"
            )


def get_product_service(request_id: str | None = None) -> ProductService:
    """Get product service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        ProductService over the configured backends.
    """
    return ProductService(get_catalog_store(), get_blob_store(), request_id=request_id)
