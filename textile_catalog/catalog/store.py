"""Catalog store client.

Typed accessors over the ``categories``, ``subcategories``,
``fabricTypes``, ``products`` and ``users`` collections, plus the
read-modify-write protocol for a product's embedded ``colorVariants``
list.

The variant mutations carry no version token: two writers racing on the
same product both read, both write, and the last write wins. A concurrent
append can be silently discarded.
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

import structlog

from textile_catalog.domain.entities import (
    Category,
    ColorVariant,
    FabricType,
    Product,
    ProductDraft,
    Role,
    Subcategory,
    UserRecord,
)
from textile_catalog.domain.exceptions import DomainError, NotFoundError, TransportError, ValidationError
from textile_catalog.infrastructure.backends import get_document_store
from textile_catalog.infrastructure.document_store import SERVER_TIMESTAMP, DocumentStore

logger = structlog.get_logger()

T = TypeVar("T")

CATEGORIES = "categories"
SUBCATEGORIES = "subcategories"
FABRIC_TYPES = "fabricTypes"
PRODUCTS = "products"
USERS = "users"


class CatalogStore:
    """Store client for catalog documents.

    Every backend failure surfaces as ``TransportError``; a missing
    product during a variant mutation surfaces as ``NotFoundError``.

    Example usage:
        store = CatalogStore(InMemoryDocumentStore())
        category_id = await store.add_category("Embroidery")
        categories = await store.list_categories()
    """

    def __init__(self, documents: DocumentStore) -> None:
        """Initialize with a document store backend.

        Args:
            documents: Document store to read and write.
        """
        self.documents = documents

    async def _guard(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except DomainError:
            raise
        except Exception as e:
            logger.error("Document store call failed", operation=operation, error=str(e))
            raise TransportError(operation, e) from e

    # ------------------------------------------------------------------
    # Taxonomy
    # ------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        """List active categories in store order."""
        snapshots = await self._guard(
            f"query {CATEGORIES}", self.documents.query(CATEGORIES)
        )
        categories = [Category.model_validate(s.to_dict()) for s in snapshots]
        return [c for c in categories if c.active]

    async def get_category(self, category_id: str) -> Category | None:
        """Fetch a category by id regardless of its active flag."""
        snapshot = await self._guard(
            f"get {CATEGORIES}/{category_id}",
            self.documents.get(CATEGORIES, category_id),
        )
        return Category.model_validate(snapshot.to_dict()) if snapshot else None

    async def list_subcategories(self, category_id: str) -> list[Subcategory]:
        """List active subcategories of a category."""
        snapshots = await self._guard(
            f"query {SUBCATEGORIES}",
            self.documents.query(SUBCATEGORIES, categoryId=category_id),
        )
        subcategories = [Subcategory.model_validate(s.to_dict()) for s in snapshots]
        return [s for s in subcategories if s.active]

    async def list_fabric_types(self, subcategory_id: str) -> list[FabricType]:
        """List active fabric types of a subcategory."""
        snapshots = await self._guard(
            f"query {FABRIC_TYPES}",
            self.documents.query(FABRIC_TYPES, subcategoryId=subcategory_id),
        )
        fabric_types = [FabricType.model_validate(s.to_dict()) for s in snapshots]
        return [f for f in fabric_types if f.active]

    @staticmethod
    def _require(value: str | None, field: str, message: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise ValidationError(message, field=field)
        return cleaned

    async def add_category(self, name: str) -> str:
        """Create an active category.

        Raises:
            ValidationError: If name is blank.
        """
        name = self._require(name, "name", "Please enter a category name")
        return await self._guard(
            f"add {CATEGORIES}",
            self.documents.add(CATEGORIES, {"name": name, "active": True}),
        )

    async def add_subcategory(self, name: str, category_id: str) -> str:
        """Create an active subcategory under a category.

        Raises:
            ValidationError: If name or parent is blank.
        """
        name = self._require(name, "name", "Please enter a sub-category name")
        category_id = self._require(category_id, "categoryId", "Please select a category")
        return await self._guard(
            f"add {SUBCATEGORIES}",
            self.documents.add(
                SUBCATEGORIES,
                {"name": name, "categoryId": category_id, "active": True},
            ),
        )

    async def add_fabric_type(self, name: str, subcategory_id: str) -> str:
        """Create an active fabric type under a subcategory.

        Raises:
            ValidationError: If name or parent is blank.
        """
        name = self._require(name, "name", "Please enter a fabric type name")
        subcategory_id = self._require(
            subcategory_id, "subcategoryId", "Please select a sub-category"
        )
        return await self._guard(
            f"add {FABRIC_TYPES}",
            self.documents.add(
                FABRIC_TYPES,
                {"name": name, "subcategoryId": subcategory_id, "active": True},
            ),
        )

    # Hard deletes. Children are not cascaded and become orphans.

    async def delete_category(self, category_id: str) -> None:
        await self._guard(
            f"delete {CATEGORIES}/{category_id}",
            self.documents.delete(CATEGORIES, category_id),
        )

    async def delete_subcategory(self, subcategory_id: str) -> None:
        await self._guard(
            f"delete {SUBCATEGORIES}/{subcategory_id}",
            self.documents.delete(SUBCATEGORIES, subcategory_id),
        )

    async def delete_fabric_type(self, fabric_type_id: str) -> None:
        await self._guard(
            f"delete {FABRIC_TYPES}/{fabric_type_id}",
            self.documents.delete(FABRIC_TYPES, fabric_type_id),
        )

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def create_product(self, draft: ProductDraft) -> str:
        """Create a product document.

        Optional fields left as None are not written at all.

        Args:
            draft: Product fields without id and timestamps.

        Returns:
            New product id.
        """
        data = draft.to_document()
        data["createdAt"] = SERVER_TIMESTAMP
        data["updatedAt"] = SERVER_TIMESTAMP
        product_id = await self._guard(
            f"add {PRODUCTS}", self.documents.add(PRODUCTS, data)
        )
        logger.info("Product created", product_id=product_id, sku=draft.sku)
        return product_id

    async def get_product(self, product_id: str) -> Product | None:
        """Fetch a product; None if it does not exist."""
        snapshot = await self._guard(
            f"get {PRODUCTS}/{product_id}",
            self.documents.get(PRODUCTS, product_id),
        )
        return Product.model_validate(snapshot.to_dict()) if snapshot else None

    async def list_products(self) -> list[Product]:
        """Fetch the full, unfiltered product collection."""
        snapshots = await self._guard(
            f"query {PRODUCTS}", self.documents.query(PRODUCTS)
        )
        return [Product.model_validate(s.to_dict()) for s in snapshots]

    async def set_main_image_path(self, product_id: str, path: str) -> None:
        """Point a product at its uploaded main image."""
        await self._guard(
            f"update {PRODUCTS}/{product_id}",
            self.documents.update(PRODUCTS, product_id, {"mainImagePath": path}),
        )

    # ------------------------------------------------------------------
    # Embedded variant list (read-modify-write)
    # ------------------------------------------------------------------

    async def _read_variants(self, product_id: str) -> list[dict[str, Any]]:
        snapshot = await self._guard(
            f"get {PRODUCTS}/{product_id}",
            self.documents.get(PRODUCTS, product_id),
        )
        if snapshot is None:
            raise NotFoundError("Product", product_id)
        variants = snapshot.data.get("colorVariants")
        return list(variants) if isinstance(variants, list) else []

    async def _write_variants(
        self, product_id: str, variants: list[dict[str, Any]]
    ) -> None:
        await self._guard(
            f"update {PRODUCTS}/{product_id}",
            self.documents.update(
                PRODUCTS,
                product_id,
                {"colorVariants": variants, "updatedAt": SERVER_TIMESTAMP},
            ),
        )

    async def add_color_variant(self, product_id: str, variant: ColorVariant) -> None:
        """Append a variant to the end of a product's list.

        Raises:
            NotFoundError: If the product does not exist.
        """
        variants = await self._read_variants(product_id)
        variants.append(variant.to_document())
        await self._write_variants(product_id, variants)
        logger.info(
            "Color variant added",
            product_id=product_id,
            variant_id=variant.id,
            variant_count=len(variants),
        )

    async def update_color_variant(
        self, product_id: str, variant_id: str, updates: dict[str, Any]
    ) -> None:
        """Shallow-merge document fields over one variant entry.

        A None value removes the key. The entry's id never changes. An
        unknown ``variant_id`` leaves the list untouched.

        Args:
            product_id: Parent product.
            variant_id: Variant to change.
            updates: camelCase fields to replace.

        Raises:
            NotFoundError: If the product does not exist.
        """
        variants = await self._read_variants(product_id)
        changes = {k: v for k, v in updates.items() if k != "id"}

        found = False
        merged_variants: list[dict[str, Any]] = []
        for entry in variants:
            if isinstance(entry, dict) and entry.get("id") == variant_id:
                found = True
                merged = {**entry, **changes}
                entry = {k: v for k, v in merged.items() if v is not None}
            merged_variants.append(entry)

        if not found:
            logger.info(
                "Color variant not found, nothing to update",
                product_id=product_id,
                variant_id=variant_id,
            )
            return

        await self._write_variants(product_id, merged_variants)
        logger.info(
            "Color variant updated",
            product_id=product_id,
            variant_id=variant_id,
            fields=sorted(changes),
        )

    async def delete_color_variant(self, product_id: str, variant_id: str) -> None:
        """Remove one variant, keeping the order of the rest.

        An unknown ``variant_id`` leaves the list untouched.

        Raises:
            NotFoundError: If the product does not exist.
        """
        variants = await self._read_variants(product_id)
        remaining = [
            entry
            for entry in variants
            if not (isinstance(entry, dict) and entry.get("id") == variant_id)
        ]

        if len(remaining) == len(variants):
            logger.info(
                "Color variant not found, nothing to delete",
                product_id=product_id,
                variant_id=variant_id,
            )
            return

        await self._write_variants(product_id, remaining)
        logger.info("Color variant deleted", product_id=product_id, variant_id=variant_id)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user_role(self, uid: str) -> Role | None:
        """Role stored at ``users/{uid}``, or None without a usable record."""
        snapshot = await self._guard(
            f"get {USERS}/{uid}", self.documents.get(USERS, uid)
        )
        if snapshot is None:
            return None
        return UserRecord.model_validate(snapshot.data).role


def get_catalog_store() -> CatalogStore:
    """Catalog store client over the configured document store."""
    return CatalogStore(get_document_store())
