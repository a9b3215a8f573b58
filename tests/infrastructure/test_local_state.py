"""Tests for client-local key-value stores."""

from pathlib import Path

from textile_catalog.infrastructure.local_state import InMemoryKeyValueStore, JsonFileKeyValueStore


class TestInMemoryKeyValueStore:
    def test_set_get(self) -> None:
        store = InMemoryKeyValueStore()
        assert store.get("k") is None
        store.set("k", "v")
        store.set("k", "w")
        assert store.get("k") == "w"


class TestJsonFileKeyValueStore:
    """Tests for the JSON file store."""

    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        assert JsonFileKeyValueStore(tmp_path / "state.json").get("k") is None

    def test_persists_across_instances(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "state.json"
        JsonFileKeyValueStore(path).set("productsFilters", '{"colorSearch": "red"}')

        assert JsonFileKeyValueStore(path).get("productsFilters") == '{"colorSearch": "red"}'

    def test_corrupt_file_reads_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("{oops", encoding="utf-8")

        store = JsonFileKeyValueStore(path)

        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"

    def test_keys_are_independent(self, tmp_path: Path) -> None:
        store = JsonFileKeyValueStore(tmp_path / "state.json")
        store.set("a", "1")
        store.set("b", "2")

        store.set("a", "3")

        assert store.get("a") == "3"
        assert store.get("b") == "2"
