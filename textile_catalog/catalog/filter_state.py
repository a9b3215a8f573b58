"""Persisted listing filters.

The five filter/sort fields are stored as one flat JSON object under a
single key of a client-local key-value store, so a selection survives
navigation and reloads. Restoring never raises: missing or malformed
data falls back to defaults.
"""

import json
from typing import Any

import structlog

from textile_catalog.catalog.query import ProductFilter, SortMode
from textile_catalog.infrastructure.local_state import KeyValueStore

logger = structlog.get_logger()

FILTERS_KEY = "productsFilters"


def _text(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    return value if isinstance(value, str) else ""


class FilterStateStore:
    """Load and save ``ProductFilter`` values."""

    def __init__(self, store: KeyValueStore, key: str = FILTERS_KEY) -> None:
        """Initialize with a key-value backend.

        Args:
            store: Client-local store.
            key: Key holding the serialized filters.
        """
        self.store = store
        self.key = key

    def load(self) -> ProductFilter:
        """Restore saved filters, or defaults if nothing usable is saved."""
        try:
            raw = self.store.get(self.key)
        except Exception as e:
            logger.warning("Failed to read saved filters", key=self.key, error=str(e))
            return ProductFilter()
        if not raw:
            return ProductFilter()

        try:
            payload = json.loads(raw)
        except ValueError as e:
            logger.warning("Failed to parse saved filters", key=self.key, error=str(e))
            return ProductFilter()
        if not isinstance(payload, dict):
            logger.warning("Saved filters are not an object", key=self.key)
            return ProductFilter()

        sort_value = _text(payload, "sortMode")
        sort_mode = (
            SortMode(sort_value)
            if sort_value in {m.value for m in SortMode}
            else SortMode.RECENT
        )
        return ProductFilter(
            category_id=_text(payload, "categoryId") or None,
            subcategory_id=_text(payload, "subcategoryId") or None,
            fabric_type_id=_text(payload, "fabricTypeId") or None,
            color_search=_text(payload, "colorSearch"),
            sort_mode=sort_mode,
        )

    def save(self, filters: ProductFilter) -> None:
        """Persist filters as one flat object."""
        payload = {
            "categoryId": filters.category_id or "",
            "subcategoryId": filters.subcategory_id or "",
            "fabricTypeId": filters.fabric_type_id or "",
            "colorSearch": filters.color_search,
            "sortMode": SortMode(filters.sort_mode).value,
        }
        self.store.set(self.key, json.dumps(payload))

    def clear(self) -> ProductFilter:
        """Reset the filters, keeping the sort mode.

        Returns:
            The filters now in effect.
        """
        cleared = ProductFilter(sort_mode=self.load().sort_mode)
        self.save(cleared)
        return cleared
