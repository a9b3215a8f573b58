"""Shared fixtures for catalog tests."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from textile_catalog.application.images import ImageUpload
from textile_catalog.catalog.store import CatalogStore
from textile_catalog.infrastructure.blob_store import InMemoryBlobStore
from textile_catalog.infrastructure.document_store import InMemoryDocumentStore

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def documents(clock) -> InMemoryDocumentStore:
    """Empty in-memory document store."""
    return InMemoryDocumentStore(clock=clock)


@pytest.fixture
def store(documents: InMemoryDocumentStore) -> CatalogStore:
    """Catalog store over the in-memory documents."""
    return CatalogStore(documents)


@pytest.fixture
def blobs() -> InMemoryBlobStore:
    """Empty in-memory blob store."""
    return InMemoryBlobStore()


@pytest.fixture
def image() -> ImageUpload:
    """A small JPEG upload."""
    return ImageUpload(filename="wine red.jpg", content_type="image/jpeg", data=b"\xff\xd8jpeg")


@pytest_asyncio.fixture
async def taxonomy(documents: InMemoryDocumentStore) -> dict[str, str]:
    """Two categories with one sub-category and fabric type each.

    Returns:
        Mapping of fixture name to document id.
    """
    await documents.set("categories", "cat-emb", {"name": "Embroidery", "active": True})
    await documents.set("categories", "cat-cot", {"name": "Cotton"})
    await documents.set(
        "subcategories", "sub-emb", {"name": "Bedsheets", "categoryId": "cat-emb", "active": True}
    )
    await documents.set("subcategories", "sub-cot", {"name": "Shirting", "categoryId": "cat-cot"})
    await documents.set(
        "fabricTypes", "fab-emb", {"name": "Satin", "subcategoryId": "sub-emb", "active": True}
    )
    await documents.set("fabricTypes", "fab-cot", {"name": "Poplin", "subcategoryId": "sub-cot"})
    return {
        "embroidery": "cat-emb",
        "cotton": "cat-cot",
        "bedsheets": "sub-emb",
        "shirting": "sub-cot",
        "satin": "fab-emb",
        "poplin": "fab-cot",
    }


def _product_document(
    sku: str,
    created_at: object = None,
    variants: list[dict] | None = None,
    category_id: str = "cat-cot",
    subcategory_id: str = "sub-cot",
    fabric_type_id: str = "fab-cot",
) -> dict:
    """Raw product document as it would sit in the store."""
    return {
        "sku": sku,
        "categoryId": category_id,
        "subcategoryId": subcategory_id,
        "fabricTypeId": fabric_type_id,
        "price": 0,
        "mainImagePath": f"products/{sku}/main_1.jpg",
        "colorVariants": variants if variants is not None else [],
        "createdBy": "user-1",
        "createdAt": created_at,
    }


@pytest.fixture
def product_document():
    """Factory for raw product documents."""
    return _product_document
