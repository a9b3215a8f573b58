"""Catalog store client, query engine and persisted filters."""

from textile_catalog.catalog.filter_state import FILTERS_KEY, FilterStateStore
from textile_catalog.catalog.query import (
    ProductFilter,
    QueryResult,
    SortMode,
    apply_query,
    filter_products,
    sort_products,
)
from textile_catalog.catalog.store import CatalogStore

__all__ = [
    # Store
    "CatalogStore",
    # Query
    "ProductFilter",
    "QueryResult",
    "SortMode",
    "apply_query",
    "filter_products",
    "sort_products",
    # Filter state
    "FILTERS_KEY",
    "FilterStateStore",
]
