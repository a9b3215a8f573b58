"""Variant lifecycle service.

Coordinates the image upload with the embedded variant list mutation so
a variant is only ever stored with a valid image reference:

1. validate the form (no network call on failure)
2. generate a variant id (create only)
3. upload the image under a path namespaced by product and variant
4. write the variant into the product's list

An upload that succeeds before a failed document write is not rolled
back; the blob stays orphaned.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

import structlog

from textile_catalog.application.images import ImageUpload, upload_image
from textile_catalog.catalog.paths import variant_image_path
from textile_catalog.catalog.store import CatalogStore, get_catalog_store
from textile_catalog.domain.entities import ColorVariant
from textile_catalog.domain.exceptions import NotFoundError, TransportError, ValidationError
from textile_catalog.infrastructure.backends import get_blob_store
from textile_catalog.infrastructure.blob_store import BlobStore
from textile_catalog.infrastructure.document_store import Clock, utc_now

logger = structlog.get_logger()


def new_variant_id() -> str:
    """Random version-4 UUID string."""
    return str(uuid4())


# ============================================================================
# Data Transfer Objects
# ============================================================================


@dataclass
class VariantForm:
    """Variant form fields.

    On update a field left as None was not supplied and keeps its stored
    value. An empty ``variant_sku`` or ``notes`` clears the field.
    """

    color_name: str | None = None
    variant_sku: str | None = None
    notes: str | None = None
    is_active: bool | None = None


def _optional_text(value: str | None) -> str | None:
    return (value or "").strip() or None


@dataclass
class SaveVariantResult:
    """Result of creating, updating or deleting a variant."""

    variant_id: str | None = None
    image_path: str | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None


# ============================================================================
# Variant Service
# ============================================================================


class VariantService:
    """Creates, updates and deletes color variants.

    Example usage:
        service = VariantService(store, blobs)
        result = await service.create_variant(
            product_id,
            VariantForm(color_name="Wine Red"),
            ImageUpload("red.jpg", "image/jpeg", data),
        )
    """

    def __init__(
        self,
        store: CatalogStore,
        blobs: BlobStore,
        request_id: str | None = None,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] = new_variant_id,
    ) -> None:
        """Initialize service.

        Args:
            store: Catalog store client.
            blobs: Blob store for variant images.
            request_id: Request ID for correlation.
            clock: Source of variant creation times.
            id_factory: Generates variant ids.
        """
        self.store = store
        self.blobs = blobs
        self.request_id = request_id
        self._clock = clock
        self._id_factory = id_factory

    @staticmethod
    def _color_name(value: str | None) -> str:
        color_name = (value or "").strip()
        if not color_name:
            raise ValidationError("Please enter a color name", field="colorName")
        return color_name

    def _failure(self, product_id: str, error: Exception) -> SaveVariantResult:
        if isinstance(error, ValidationError):
            return SaveVariantResult(
                success=False, error=error.message, error_code="VALIDATION_ERROR"
            )

        logger.error(
            "Failed to save variant",
            product_id=product_id,
            error=str(error),
            request_id=self.request_id,
        )
        if isinstance(error, NotFoundError):
            error_code = "PRODUCT_NOT_FOUND"
        elif isinstance(error, TransportError):
            error_code = "TRANSPORT_ERROR"
        else:
            error_code = "SAVE_FAILED"
        return SaveVariantResult(
            success=False,
            error=f"Failed to save variant: {error}",
            error_code=error_code,
        )

    async def create_variant(
        self,
        product_id: str,
        form: VariantForm,
        image: ImageUpload | None,
    ) -> SaveVariantResult:
        """Upload the image and append a new active variant.

        Args:
            product_id: Parent product.
            form: Variant fields; color name is required.
            image: Variant image; required.

        Returns:
            SaveVariantResult with the new variant id and image path.
        """
        try:
            color_name = self._color_name(form.color_name)
            if image is None:
                raise ValidationError("Please select an image for the variant", field="image")
            image.validate()

            variant_id = self._id_factory()
            now = self._clock()
            path = await upload_image(
                self.blobs,
                variant_image_path(product_id, variant_id, image.filename, now),
                image,
            )

            variant = ColorVariant(
                id=variant_id,
                image_path=path,
                color_name=color_name,
                variant_sku=_optional_text(form.variant_sku),
                created_at=now,
                is_active=True,
                notes=_optional_text(form.notes),
            )
            await self.store.add_color_variant(product_id, variant)

            logger.info(
                "Variant created",
                product_id=product_id,
                variant_id=variant_id,
                request_id=self.request_id,
            )
            return SaveVariantResult(variant_id=variant_id, image_path=path)

        except Exception as e:
            return self._failure(product_id, e)

    async def update_variant(
        self,
        product_id: str,
        variant_id: str,
        form: VariantForm,
        image: ImageUpload | None = None,
    ) -> SaveVariantResult:
        """Merge the supplied form fields into an existing variant.

        Fields left as None keep their stored value. The image is uploaded
        only when a new one is given; otherwise the stored ``imagePath`` is
        left untouched.

        Args:
            product_id: Parent product.
            variant_id: Variant to update.
            form: Variant fields; a supplied color name must not be blank.
            image: Optional replacement image.

        Returns:
            SaveVariantResult with the new image path when one was uploaded.
        """
        try:
            updates: dict[str, Any] = {}
            if form.color_name is not None:
                updates["colorName"] = self._color_name(form.color_name)
            if form.variant_sku is not None:
                updates["variantSKU"] = _optional_text(form.variant_sku)
            if form.notes is not None:
                updates["notes"] = _optional_text(form.notes)
            if form.is_active is not None:
                updates["isActive"] = form.is_active

            path = None
            if image is not None:
                image.validate()
                path = await upload_image(
                    self.blobs,
                    variant_image_path(product_id, variant_id, image.filename, self._clock()),
                    image,
                )
                updates["imagePath"] = path

            await self.store.update_color_variant(product_id, variant_id, updates)
            return SaveVariantResult(variant_id=variant_id, image_path=path)

        except Exception as e:
            return self._failure(product_id, e)

    async def delete_variant(self, product_id: str, variant_id: str) -> SaveVariantResult:
        """Remove a variant from its product's list."""
        try:
            await self.store.delete_color_variant(product_id, variant_id)
            return SaveVariantResult(variant_id=variant_id)
        except Exception as e:
            return self._failure(product_id, e)


def get_variant_service(request_id: str | None = None) -> VariantService:
    """Get variant service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        VariantService over the configured backends.
    """
    return VariantService(get_catalog_store(), get_blob_store(), request_id=request_id)
