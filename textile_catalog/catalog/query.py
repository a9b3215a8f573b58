"""Catalog query engine.

Derives the visible product list from the full collection, the current
hierarchy selection, the color search text and the sort mode. Everything
runs in memory over a list already fetched from the store.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from textile_catalog.domain.entities import Product
from textile_catalog.domain.selector import HierarchySelection


class SortMode(str, Enum):
    """Ordering by creation time."""

    RECENT = "recent"
    OLDEST = "oldest"


@dataclass
class ProductFilter:
    """Filter parameters for the product listing.

    Attributes:
        category_id: Exact category match; None or empty skips the check.
        subcategory_id: Exact subcategory match.
        fabric_type_id: Exact match on the product-level fabric type.
        color_search: Case-insensitive substring over variant color names.
        sort_mode: Creation-time ordering.
    """

    category_id: str | None = None
    subcategory_id: str | None = None
    fabric_type_id: str | None = None
    color_search: str = ""
    sort_mode: SortMode = SortMode.RECENT

    @classmethod
    def from_selection(
        cls,
        selection: HierarchySelection,
        color_search: str = "",
        sort_mode: SortMode = SortMode.RECENT,
    ) -> "ProductFilter":
        """Build a filter from a hierarchy selector snapshot."""
        return cls(
            category_id=selection.category_id,
            subcategory_id=selection.subcategory_id,
            fabric_type_id=selection.fabric_type_id,
            color_search=color_search,
            sort_mode=sort_mode,
        )

    @property
    def is_active(self) -> bool:
        """Whether any filter (not counting sort) is set."""
        return bool(
            self.category_id
            or self.subcategory_id
            or self.fabric_type_id
            or self.color_search.strip()
        )

    def matches(self, product: Product) -> bool:
        """Conjunctive predicate over every filter that is set.

        Args:
            product: Product to test.

        Returns:
            True if the product passes all active filters.
        """
        if self.category_id and product.category_id != self.category_id:
            return False
        if self.subcategory_id and product.subcategory_id != self.subcategory_id:
            return False
        if self.fabric_type_id and product.fabric_type_id != self.fabric_type_id:
            return False

        needle = self.color_search.strip().lower()
        if needle:
            return any(
                needle in variant.color_name.lower() for variant in product.color_variants
            )
        return True


@dataclass
class QueryResult:
    """Visible products plus the size of the unfiltered set.

    Attributes:
        items: Filtered and sorted products.
        total: Number of products before filtering.
    """

    items: list[Product]
    total: int

    @property
    def matched(self) -> int:
        """Number of products that passed the filters."""
        return len(self.items)


def filter_products(products: Iterable[Product], filters: ProductFilter) -> list[Product]:
    """Keep products that pass every active filter, in input order."""
    return [p for p in products if filters.matches(p)]


def sort_products(products: Iterable[Product], mode: SortMode = SortMode.RECENT) -> list[Product]:
    """Sort by creation time.

    Products with an unresolvable ``created_at`` sort as epoch zero.
    The sort is stable, so ties keep their input order.

    Args:
        products: Products to sort.
        mode: RECENT for newest first, OLDEST for oldest first.

    Returns:
        New sorted list.
    """
    return sorted(
        products,
        key=lambda p: p.created_at_epoch,
        reverse=SortMode(mode) == SortMode.RECENT,
    )


def apply_query(products: list[Product], filters: ProductFilter) -> QueryResult:
    """Filter then sort the full product list.

    Args:
        products: Full collection.
        filters: Current filters and sort mode.

    Returns:
        Query result with the visible items and the total count.
    """
    visible = sort_products(filter_products(products, filters), filters.sort_mode)
    return QueryResult(items=visible, total=len(products))
