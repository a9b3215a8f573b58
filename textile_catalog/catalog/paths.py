"""Blob paths for product images."""

from datetime import datetime

from textile_catalog.infrastructure.document_store import utc_now


def file_extension(filename: str) -> str:
    """Text after the last dot, or the whole name when there is none."""
    return filename.rsplit(".", 1)[-1]


def _timestamp_ms(now: datetime | None) -> int:
    return int((now or utc_now()).timestamp() * 1000)


def main_image_path(product_id: str, filename: str, now: datetime | None = None) -> str:
    """``products/{productId}/main_{timestamp}.{ext}``"""
    return f"products/{product_id}/main_{_timestamp_ms(now)}.{file_extension(filename)}"


def variant_image_path(
    product_id: str, variant_id: str, filename: str, now: datetime | None = None
) -> str:
    """``products/{productId}/variants/variant_{variantId}_{timestamp}.{ext}``"""
    return (
        f"products/{product_id}/variants/"
        f"variant_{variant_id}_{_timestamp_ms(now)}.{file_extension(filename)}"
    )
