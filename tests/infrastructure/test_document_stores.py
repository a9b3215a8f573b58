"""Tests for document store backends.

Both backends run the same behavioural checks; the SQL one uses a
throwaway SQLite file.
"""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from textile_catalog.catalog.store import CatalogStore
from textile_catalog.domain.entities import ColorVariant, ProductDraft
from textile_catalog.infrastructure.database import SqlDocumentStore
from textile_catalog.infrastructure.document_store import (
    SERVER_TIMESTAMP,
    DocumentStore,
    InMemoryDocumentStore,
    resolve_server_timestamps,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture(params=["memory", "sql"])
async def backend(request, tmp_path):
    """Each document store backend with a fixed clock."""
    if request.param == "memory":
        yield InMemoryDocumentStore(clock=lambda: NOW)
        return

    store = SqlDocumentStore(f"sqlite+aiosqlite:///{tmp_path / 'docs.db'}", clock=lambda: NOW)
    await store.create_schema()
    yield store
    await store.close()


def test_resolve_server_timestamps_top_level_only() -> None:
    resolved = resolve_server_timestamps(
        {"createdAt": SERVER_TIMESTAMP, "nested": {"at": SERVER_TIMESTAMP}}, NOW
    )
    assert resolved["createdAt"] == NOW
    assert resolved["nested"]["at"] is SERVER_TIMESTAMP


class TestDocumentStore:
    """Behaviour shared by every backend."""

    @pytest.mark.asyncio
    async def test_add_then_get(self, backend: DocumentStore) -> None:
        document_id = await backend.add("categories", {"name": "Silk", "active": True})

        snapshot = await backend.get("categories", document_id)

        assert snapshot.id == document_id
        assert snapshot.data == {"name": "Silk", "active": True}
        assert snapshot.to_dict() == {"id": document_id, "name": "Silk", "active": True}

    @pytest.mark.asyncio
    async def test_get_missing(self, backend: DocumentStore) -> None:
        assert await backend.get("categories", "missing") is None

    @pytest.mark.asyncio
    async def test_query_equality_in_insertion_order(self, backend: DocumentStore) -> None:
        await backend.set("subcategories", "a", {"name": "A", "categoryId": "c1"})
        await backend.set("subcategories", "b", {"name": "B", "categoryId": "c2"})
        await backend.set("subcategories", "c", {"name": "C", "categoryId": "c1"})

        snapshots = await backend.query("subcategories", categoryId="c1")

        assert [s.id for s in snapshots] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_query_is_collection_scoped(self, backend: DocumentStore) -> None:
        await backend.set("categories", "x", {"name": "X"})
        assert await backend.query("products") == []

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, backend: DocumentStore) -> None:
        await backend.set("products", "p1", {"sku": "A", "price": 0})

        await backend.update("products", "p1", {"price": 10})

        assert (await backend.get("products", "p1")).data == {"sku": "A", "price": 10}

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, backend: DocumentStore) -> None:
        with pytest.raises(KeyError):
            await backend.update("products", "missing", {"price": 1})

    @pytest.mark.asyncio
    async def test_delete(self, backend: DocumentStore) -> None:
        await backend.set("products", "p1", {"sku": "A"})

        await backend.delete("products", "p1")
        await backend.delete("products", "p1")

        assert await backend.get("products", "p1") is None

    @pytest.mark.asyncio
    async def test_server_timestamp_resolved_on_write(self, backend: DocumentStore) -> None:
        document_id = await backend.add("products", {"createdAt": SERVER_TIMESTAMP})

        stored = (await backend.get("products", document_id)).data["createdAt"]

        assert stored is not SERVER_TIMESTAMP
        assert stored in (NOW, NOW.isoformat().replace("+00:00", "Z"), NOW.isoformat())

    @pytest.mark.asyncio
    async def test_catalog_round_trip(self, backend: DocumentStore) -> None:
        """The catalog store works unchanged over either backend."""
        store = CatalogStore(backend)
        product_id = await store.create_product(
            ProductDraft(
                sku="EMB-1",
                category_id="c",
                subcategory_id="s",
                fabric_type_id="f",
                created_by="u",
            )
        )
        await store.add_color_variant(
            product_id,
            ColorVariant(id="v1", image_path="p", color_name="Red", created_at=NOW),
        )

        product = await store.get_product(product_id)

        assert product.created_at == NOW
        assert product.color_variants[0].created_at == NOW


class TestInMemoryIsolation:
    """The in-memory store never shares state with callers."""

    @pytest.mark.asyncio
    async def test_returned_data_is_a_copy(self) -> None:
        store = InMemoryDocumentStore()
        await store.set("products", "p1", {"colorVariants": [{"id": "a"}]})

        snapshot = await store.get("products", "p1")
        snapshot.data["colorVariants"].append({"id": "b"})

        assert (await store.get("products", "p1")).data["colorVariants"] == [{"id": "a"}]
