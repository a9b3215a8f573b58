"""Image uploads and download URL resolution."""

from dataclasses import dataclass

import structlog

from textile_catalog.domain.entities import Product
from textile_catalog.domain.exceptions import DomainError, TransportError, ValidationError
from textile_catalog.infrastructure.blob_store import BlobStore

logger = structlog.get_logger()


@dataclass
class ImageUpload:
    """An image file chosen by the user."""

    filename: str
    content_type: str
    data: bytes

    def validate(self) -> None:
        """Reject anything that is not an image.

        Raises:
            ValidationError: If the content type is not ``image/*``.
        """
        if not (self.content_type or "").startswith("image/"):
            raise ValidationError("Please select an image file", field="image")


async def upload_image(blobs: BlobStore, path: str, image: ImageUpload) -> str:
    """Upload an image, reporting backend failures as ``TransportError``.

    Args:
        blobs: Blob store.
        path: Destination path.
        image: Image to upload.

    Returns:
        Stored path.
    """
    try:
        return await blobs.upload(path, image.data, image.content_type)
    except DomainError:
        raise
    except Exception as e:
        logger.error("Image upload failed", path=path, error=str(e))
        raise TransportError(f"upload {path}", e) from e


class ImageUrlResolver:
    """Resolves blob paths to download URLs.

    Each lookup is independent: a failure is logged and the image is
    simply left out.
    """

    def __init__(self, blobs: BlobStore) -> None:
        self.blobs = blobs

    async def resolve(self, path: str | None) -> str | None:
        """URL for one path, or None if it is empty or cannot be resolved."""
        if not path:
            return None
        try:
            return await self.blobs.get_download_url(path)
        except Exception as e:
            logger.warning("Failed to resolve image URL", path=path, error=str(e))
            return None

    async def resolve_main_image(self, product: Product) -> str | None:
        return await self.resolve(product.main_image_path)

    async def resolve_variant_images(self, product: Product) -> dict[str, str]:
        """Resolve every variant image in list order.

        Returns:
            Mapping of variant id to URL for the variants that resolved.
        """
        urls: dict[str, str] = {}
        for variant in product.color_variants:
            url = await self.resolve(variant.image_path)
            if url:
                urls[variant.id] = url
        return urls
