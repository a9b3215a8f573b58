"""Tests for the catalog store client."""

from datetime import datetime, timedelta, timezone

import pytest

from textile_catalog.catalog.store import CatalogStore
from textile_catalog.domain.entities import ColorVariant, ProductDraft, Role
from textile_catalog.domain.exceptions import NotFoundError, TransportError, ValidationError
from textile_catalog.infrastructure.document_store import InMemoryDocumentStore


class TickingClock:
    """Clock that advances one second per reading."""

    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


class FailingDocumentStore(InMemoryDocumentStore):
    """Document store whose reads fail."""

    async def get(self, collection, document_id):
        raise ConnectionError("backend unavailable")

    async def query(self, collection, **equals):
        raise ConnectionError("backend unavailable")


def variant(variant_id: str, color_name: str = "Red") -> ColorVariant:
    return ColorVariant(id=variant_id, image_path=f"img/{variant_id}.jpg", color_name=color_name)


@pytest.fixture
def draft() -> ProductDraft:
    return ProductDraft(
        sku="SKU-1",
        category_id="cat-cot",
        subcategory_id="sub-cot",
        fabric_type_id="fab-cot",
        created_by="user-1",
    )


class TestTaxonomy:
    """Tests for taxonomy reads and admin mutations."""

    @pytest.mark.asyncio
    async def test_lists_active_categories_including_absent_flag(
        self, store: CatalogStore, documents: InMemoryDocumentStore, taxonomy
    ) -> None:
        await documents.set("categories", "cat-old", {"name": "Old", "active": False})

        names = [c.name for c in await store.list_categories()]

        assert names == ["Embroidery", "Cotton"]

    @pytest.mark.asyncio
    async def test_subcategories_filtered_by_parent_and_active(
        self, store: CatalogStore, documents: InMemoryDocumentStore, taxonomy
    ) -> None:
        await documents.set(
            "subcategories", "sub-off", {"name": "Off", "categoryId": "cat-cot", "active": False}
        )

        subs = await store.list_subcategories("cat-cot")

        assert [s.id for s in subs] == ["sub-cot"]

    @pytest.mark.asyncio
    async def test_fabric_types_absent_flag_is_active(self, store: CatalogStore, taxonomy) -> None:
        fabrics = await store.list_fabric_types("sub-cot")
        assert [f.name for f in fabrics] == ["Poplin"]

    @pytest.mark.asyncio
    async def test_add_category_trims_and_activates(
        self, store: CatalogStore, documents: InMemoryDocumentStore
    ) -> None:
        category_id = await store.add_category("  Silk  ")

        snapshot = await documents.get("categories", category_id)
        assert snapshot.data == {"name": "Silk", "active": True}

    @pytest.mark.asyncio
    async def test_add_category_rejects_blank_name(self, store: CatalogStore) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await store.add_category("   ")
        assert exc_info.value.message == "Please enter a category name"

    @pytest.mark.asyncio
    async def test_add_subcategory_requires_parent(self, store: CatalogStore) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await store.add_subcategory("Shirting", "")
        assert exc_info.value.message == "Please select a category"

    @pytest.mark.asyncio
    async def test_add_fabric_type(self, store: CatalogStore) -> None:
        fabric_id = await store.add_fabric_type("Twill", "sub-cot")
        fabrics = await store.list_fabric_types("sub-cot")
        assert [f.id for f in fabrics] == [fabric_id]

    @pytest.mark.asyncio
    async def test_delete_category_orphans_children(self, store: CatalogStore, taxonomy) -> None:
        """Deletes never cascade."""
        await store.delete_category("cat-cot")

        assert [c.id for c in await store.list_categories()] == ["cat-emb"]
        assert [s.id for s in await store.list_subcategories("cat-cot")] == ["sub-cot"]

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_an_error(self, store: CatalogStore) -> None:
        await store.delete_fabric_type("nope")


class TestProducts:
    """Tests for product documents."""

    @pytest.mark.asyncio
    async def test_create_product_stamps_server_time(
        self, store: CatalogStore, documents: InMemoryDocumentStore, draft: ProductDraft
    ) -> None:
        product_id = await store.create_product(draft)

        product = await store.get_product(product_id)
        assert product.id == product_id
        assert product.created_at is not None
        assert product.created_at == product.updated_at
        raw = (await documents.get("products", product_id)).data
        assert "description" not in raw
        assert "panno" not in raw

    @pytest.mark.asyncio
    async def test_get_missing_product(self, store: CatalogStore) -> None:
        assert await store.get_product("missing") is None

    @pytest.mark.asyncio
    async def test_set_main_image_path(self, store: CatalogStore, draft: ProductDraft) -> None:
        product_id = await store.create_product(draft)
        await store.set_main_image_path(product_id, "products/x/main_1.jpg")
        assert (await store.get_product(product_id)).main_image_path == "products/x/main_1.jpg"

    @pytest.mark.asyncio
    async def test_backend_failure_is_transport_error(self) -> None:
        store = CatalogStore(FailingDocumentStore())

        with pytest.raises(TransportError) as exc_info:
            await store.get_product("p1")

        assert exc_info.value.message == "backend unavailable"


class TestColorVariants:
    """Tests for the embedded variant list read-modify-write."""

    @pytest.fixture
    def ticking_store(self) -> CatalogStore:
        return CatalogStore(InMemoryDocumentStore(clock=TickingClock()))

    @pytest.mark.asyncio
    async def test_add_appends_in_order(self, store: CatalogStore, draft: ProductDraft) -> None:
        product_id = await store.create_product(draft)

        await store.add_color_variant(product_id, variant("a"))
        await store.add_color_variant(product_id, variant("b"))
        await store.add_color_variant(product_id, variant("c"))

        product = await store.get_product(product_id)
        assert [v.id for v in product.color_variants] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_add_refreshes_updated_at(
        self, ticking_store: CatalogStore, draft: ProductDraft
    ) -> None:
        product_id = await ticking_store.create_product(draft)
        before = (await ticking_store.get_product(product_id)).updated_at

        await ticking_store.add_color_variant(product_id, variant("a"))

        assert (await ticking_store.get_product(product_id)).updated_at > before

    @pytest.mark.asyncio
    async def test_add_to_missing_product(self, store: CatalogStore) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await store.add_color_variant("missing", variant("a"))
        assert str(exc_info.value) == "Product not found"

    @pytest.mark.asyncio
    async def test_update_merges_one_entry(self, store: CatalogStore, draft: ProductDraft) -> None:
        product_id = await store.create_product(draft)
        for variant_id in ("a", "b", "c"):
            await store.add_color_variant(product_id, variant(variant_id))

        await store.update_color_variant(product_id, "b", {"colorName": "Blue", "notes": "dark"})

        product = await store.get_product(product_id)
        assert [v.id for v in product.color_variants] == ["a", "b", "c"]
        updated = product.get_variant("b")
        assert updated.color_name == "Blue"
        assert updated.notes == "dark"
        assert updated.image_path == "img/b.jpg"
        assert product.get_variant("a").color_name == "Red"

    @pytest.mark.asyncio
    async def test_update_none_removes_key(
        self, store: CatalogStore, documents: InMemoryDocumentStore, draft: ProductDraft
    ) -> None:
        product_id = await store.create_product(draft)
        await store.add_color_variant(
            product_id, ColorVariant(id="a", image_path="p", color_name="Red", notes="old")
        )

        await store.update_color_variant(product_id, "a", {"notes": None})

        entry = (await documents.get("products", product_id)).data["colorVariants"][0]
        assert "notes" not in entry

    @pytest.mark.asyncio
    async def test_update_cannot_change_id(self, store: CatalogStore, draft: ProductDraft) -> None:
        product_id = await store.create_product(draft)
        await store.add_color_variant(product_id, variant("a"))

        await store.update_color_variant(product_id, "a", {"id": "z", "colorName": "Teal"})

        product = await store.get_product(product_id)
        assert [v.id for v in product.color_variants] == ["a"]

    @pytest.mark.asyncio
    async def test_update_unknown_variant_is_noop(
        self, ticking_store: CatalogStore, draft: ProductDraft
    ) -> None:
        product_id = await ticking_store.create_product(draft)
        await ticking_store.add_color_variant(product_id, variant("a"))
        before = await ticking_store.get_product(product_id)

        await ticking_store.update_color_variant(product_id, "zzz", {"colorName": "Teal"})

        after = await ticking_store.get_product(product_id)
        assert after.color_variants == before.color_variants
        assert after.updated_at == before.updated_at

    @pytest.mark.asyncio
    async def test_delete_preserves_order(self, store: CatalogStore, draft: ProductDraft) -> None:
        product_id = await store.create_product(draft)
        for variant_id in ("a", "b", "c"):
            await store.add_color_variant(product_id, variant(variant_id))

        await store.delete_color_variant(product_id, "b")

        product = await store.get_product(product_id)
        assert [v.id for v in product.color_variants] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_delete_unknown_variant_is_noop(
        self, store: CatalogStore, draft: ProductDraft
    ) -> None:
        product_id = await store.create_product(draft)
        await store.add_color_variant(product_id, variant("a"))

        await store.delete_color_variant(product_id, "zzz")

        assert len((await store.get_product(product_id)).color_variants) == 1

    @pytest.mark.asyncio
    async def test_delete_on_missing_product(self, store: CatalogStore) -> None:
        with pytest.raises(NotFoundError):
            await store.delete_color_variant("missing", "a")

    @pytest.mark.asyncio
    async def test_interleaved_writers_last_write_wins(
        self, store: CatalogStore, documents: InMemoryDocumentStore, draft: ProductDraft
    ) -> None:
        """Two read-modify-writes racing on one product lose an append."""
        product_id = await store.create_product(draft)
        first_read = await store._read_variants(product_id)
        second_read = await store._read_variants(product_id)

        await store._write_variants(product_id, first_read + [variant("a").to_document()])
        await store._write_variants(product_id, second_read + [variant("b").to_document()])

        product = await store.get_product(product_id)
        assert [v.id for v in product.color_variants] == ["b"]


class TestUsers:
    """Tests for role lookups."""

    @pytest.mark.asyncio
    async def test_role_record(self, store: CatalogStore, documents: InMemoryDocumentStore) -> None:
        await documents.set("users", "u1", {"role": "admin"})
        assert await store.get_user_role("u1") == Role.ADMIN

    @pytest.mark.asyncio
    async def test_missing_record(self, store: CatalogStore) -> None:
        assert await store.get_user_role("u1") is None
