"""Dependent hierarchy selector.

One state machine drives the category → subcategory → fabric type
dropdowns used by both the product listing filters and the product
creation form. Each instance is parameterized by the fetch functions for
the dependent option lists.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

import structlog

from textile_catalog.domain.entities import FabricType, Subcategory
from textile_catalog.domain.exceptions import InvalidStateTransitionError

logger = structlog.get_logger()

FetchSubcategories = Callable[[str], Awaitable[list[Subcategory]]]
FetchFabricTypes = Callable[[str], Awaitable[list[FabricType]]]


class SelectorState(str, Enum):
    """Selector states.

    State diagram:
        NO_CATEGORY
          │ ▲
          │ │ clear category
          ▼ │
        CATEGORY_SELECTED ◄──── select another category (from any state)
          │ ▲
          │ │ clear subcategory
          ▼ │
        SUBCATEGORY_SELECTED
          │ ▲
          │ │ clear fabric type
          ▼ │
        FABRIC_TYPE_SELECTED
    """

    NO_CATEGORY = "no_category"
    CATEGORY_SELECTED = "category_selected"
    SUBCATEGORY_SELECTED = "subcategory_selected"
    FABRIC_TYPE_SELECTED = "fabric_type_selected"

    def can_transition_to(self, target: "SelectorState") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _SELECTOR_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["SelectorState"]:
        """Get list of valid target states.

        Returns:
            List of states that can be transitioned to.
        """
        return list(_SELECTOR_TRANSITIONS.get(self, set()))

    @property
    def depth(self) -> int:
        """Number of levels currently selected."""
        return _DEPTH[self]


_DEPTH: dict[SelectorState, int] = {
    SelectorState.NO_CATEGORY: 0,
    SelectorState.CATEGORY_SELECTED: 1,
    SelectorState.SUBCATEGORY_SELECTED: 2,
    SelectorState.FABRIC_TYPE_SELECTED: 3,
}

# Selecting a level requires its parent level; clearing is always allowed.
_SELECTOR_TRANSITIONS: dict[SelectorState, set[SelectorState]] = {
    SelectorState.NO_CATEGORY: {
        SelectorState.NO_CATEGORY,
        SelectorState.CATEGORY_SELECTED,
    },
    SelectorState.CATEGORY_SELECTED: {
        SelectorState.NO_CATEGORY,
        SelectorState.CATEGORY_SELECTED,
        SelectorState.SUBCATEGORY_SELECTED,
    },
    SelectorState.SUBCATEGORY_SELECTED: {
        SelectorState.NO_CATEGORY,
        SelectorState.CATEGORY_SELECTED,
        SelectorState.SUBCATEGORY_SELECTED,
        SelectorState.FABRIC_TYPE_SELECTED,
    },
    SelectorState.FABRIC_TYPE_SELECTED: {
        SelectorState.NO_CATEGORY,
        SelectorState.CATEGORY_SELECTED,
        SelectorState.SUBCATEGORY_SELECTED,
        SelectorState.FABRIC_TYPE_SELECTED,
    },
}


@dataclass
class HierarchySelection:
    """Snapshot of the selected ids and fetched option lists."""

    category_id: str | None = None
    subcategory_id: str | None = None
    fabric_type_id: str | None = None
    subcategories: list[Subcategory] = field(default_factory=list)
    fabric_types: list[FabricType] = field(default_factory=list)


class HierarchySelector:
    """Dependent dropdown state machine.

    Selecting a level clears every level below it and refetches the
    options for the next level. Clearing a level cascades the clear and
    the option reset downward.

    Example usage:
        selector = HierarchySelector(
            fetch_subcategories=store.list_subcategories,
            fetch_fabric_types=store.list_fabric_types,
        )
        await selector.select_category("cat-1")
        await selector.select_subcategory("sub-1")
        selector.select_fabric_type("fab-1")
    """

    def __init__(
        self,
        fetch_subcategories: FetchSubcategories,
        fetch_fabric_types: FetchFabricTypes,
    ) -> None:
        """Initialize selector in the NO_CATEGORY state.

        Args:
            fetch_subcategories: Returns subcategories of a category.
            fetch_fabric_types: Returns fabric types of a subcategory.
        """
        self._fetch_subcategories = fetch_subcategories
        self._fetch_fabric_types = fetch_fabric_types
        self._selection = HierarchySelection()

    @property
    def state(self) -> SelectorState:
        """Current state derived from the selected ids."""
        if self._selection.category_id is None:
            return SelectorState.NO_CATEGORY
        if self._selection.subcategory_id is None:
            return SelectorState.CATEGORY_SELECTED
        if self._selection.fabric_type_id is None:
            return SelectorState.SUBCATEGORY_SELECTED
        return SelectorState.FABRIC_TYPE_SELECTED

    @property
    def category_id(self) -> str | None:
        return self._selection.category_id

    @property
    def subcategory_id(self) -> str | None:
        return self._selection.subcategory_id

    @property
    def fabric_type_id(self) -> str | None:
        return self._selection.fabric_type_id

    @property
    def subcategories(self) -> list[Subcategory]:
        return list(self._selection.subcategories)

    @property
    def fabric_types(self) -> list[FabricType]:
        return list(self._selection.fabric_types)

    def snapshot(self) -> HierarchySelection:
        """Copy of the current selection and option lists."""
        return HierarchySelection(
            category_id=self._selection.category_id,
            subcategory_id=self._selection.subcategory_id,
            fabric_type_id=self._selection.fabric_type_id,
            subcategories=list(self._selection.subcategories),
            fabric_types=list(self._selection.fabric_types),
        )

    def _transition(self, target: SelectorState) -> None:
        current = self.state
        if not current.can_transition_to(target):
            raise InvalidStateTransitionError(
                entity_type="HierarchySelector",
                current_state=current.value,
                target_state=target.value,
                allowed_transitions=[s.value for s in current.allowed_transitions()],
            )

    def _clear_below_category(self) -> None:
        self._selection.subcategory_id = None
        self._selection.fabric_type_id = None
        self._selection.subcategories = []
        self._selection.fabric_types = []

    def _clear_below_subcategory(self) -> None:
        self._selection.fabric_type_id = None
        self._selection.fabric_types = []

    async def select_category(self, category_id: str | None) -> None:
        """Select a category, or clear it with None/empty.

        Args:
            category_id: Category to select.
        """
        if not category_id:
            self.clear()
            return

        self._transition(SelectorState.CATEGORY_SELECTED)
        self._selection.category_id = category_id
        self._clear_below_category()
        self._selection.subcategories = await self._fetch_subcategories(category_id)

    async def select_subcategory(self, subcategory_id: str | None) -> None:
        """Select a subcategory of the current category, or clear it.

        Args:
            subcategory_id: Subcategory to select.

        Raises:
            InvalidStateTransitionError: If no category is selected.
        """
        if not subcategory_id:
            self._selection.subcategory_id = None
            self._clear_below_subcategory()
            return

        self._transition(SelectorState.SUBCATEGORY_SELECTED)
        self._selection.subcategory_id = subcategory_id
        self._clear_below_subcategory()
        self._selection.fabric_types = await self._fetch_fabric_types(subcategory_id)

    def select_fabric_type(self, fabric_type_id: str | None) -> None:
        """Select a fabric type, or clear it. Terminal; nothing cascades.

        Args:
            fabric_type_id: Fabric type to select.

        Raises:
            InvalidStateTransitionError: If no subcategory is selected.
        """
        if not fabric_type_id:
            self._selection.fabric_type_id = None
            return

        self._transition(SelectorState.FABRIC_TYPE_SELECTED)
        self._selection.fabric_type_id = fabric_type_id

    def clear(self) -> None:
        """Clear every level and every fetched option list."""
        self._selection.category_id = None
        self._clear_below_category()

    async def restore(
        self,
        category_id: str | None,
        subcategory_id: str | None = None,
        fabric_type_id: str | None = None,
    ) -> None:
        """Re-hydrate a persisted selection, refetching option lists.

        Levels whose parent is missing are dropped rather than rejected,
        since persisted state may be stale.

        Args:
            category_id: Persisted category id.
            subcategory_id: Persisted subcategory id.
            fabric_type_id: Persisted fabric type id.
        """
        await self.select_category(category_id)
        if self.category_id and subcategory_id:
            await self.select_subcategory(subcategory_id)
            if fabric_type_id:
                self.select_fabric_type(fabric_type_id)
        logger.debug(
            "Selector restored",
            state=self.state.value,
            category_id=self.category_id,
            subcategory_id=self.subcategory_id,
            fabric_type_id=self.fabric_type_id,
        )
