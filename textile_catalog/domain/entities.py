"""Catalog entities.

Pydantic models over the stored documents. Documents use camelCase keys;
Python code uses snake_case attributes via aliases. Soft-delete flags
(``active``/``isActive``) default to true when absent or null, resolved
here once instead of at every reader.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

EMBROIDERY_CATEGORY = "embroidery"


class Role(str, Enum):
    """Roles a signed-in user can hold."""

    ADMIN = "admin"
    USER = "user"


ROLE_VALUES = {r.value for r in Role}


def resolve_timestamp(value: Any) -> datetime | None:
    """Resolve a stored timestamp to an aware datetime.

    Accepts datetimes, ISO-8601 strings, epoch seconds and
    ``{"seconds": ..., "nanoseconds": ...}`` mappings written by older
    clients. Anything else is unresolvable.

    Args:
        value: Raw stored value.

    Returns:
        Aware datetime, or None when the value cannot be resolved.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, tz=timezone.utc)
        if isinstance(value, str) and value.strip():
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        if isinstance(value, dict) and "seconds" in value:
            seconds = float(value["seconds"]) + float(value.get("nanoseconds", 0)) / 1e9
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, TypeError, OverflowError, OSError):
        return None
    return None


class CatalogDocument(BaseModel):
    """Base model for stored documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_document(self) -> dict[str, Any]:
        """Serialize to a storable mapping.

        Only keys that were set are emitted and ``None`` values are
        dropped, so absent optional fields never reach the store.

        Returns:
            camelCase document without the ``id`` key.
        """
        return self.model_dump(
            by_alias=True,
            exclude_unset=True,
            exclude_none=True,
            exclude={"id"},
        )


class TaxonomyEntity(CatalogDocument):
    """Common shape of categories, subcategories and fabric types."""

    id: str
    name: str
    active: bool = True

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Fall back to the id so selectors are never blank
        if not data.get("name"):
            data["name"] = data.get("id", "")
        if data.get("active") is None:
            data["active"] = True
        return data


class Category(TaxonomyEntity):
    """Root of the hierarchy."""

    @property
    def is_embroidery(self) -> bool:
        """Whether products in this category carry a ``panno`` value."""
        return self.name.lower() == EMBROIDERY_CATEGORY


class Subcategory(TaxonomyEntity):
    """Second level; references a category (orphaning tolerated)."""

    category_id: str = ""


class FabricType(TaxonomyEntity):
    """Third level; references a subcategory (orphaning tolerated)."""

    subcategory_id: str = ""


class ColorVariant(CatalogDocument):
    """Color variant embedded in a product's ``colorVariants`` list.

    Has no lifecycle of its own; it is created, changed and removed only
    by rewriting its parent product's list.

    Attributes:
        id: Client-generated token, unique within the parent list.
        image_path: Blob path of the variant image.
        color_name: Display name of the color.
        variant_sku: Optional variant-specific SKU.
        created_at: Creation time.
        is_active: Soft-delete flag; inactive variants cannot be selected.
        notes: Free-form notes.
    """

    id: str
    image_path: str = ""
    color_name: str = ""
    variant_sku: str | None = Field(default=None, alias="variantSKU")
    created_at: datetime | None = None
    is_active: bool = True
    notes: str | None = None

    @field_validator("is_active", mode="before")
    @classmethod
    def _default_active(cls, value: Any) -> Any:
        return True if value is None else value

    @field_validator("created_at", mode="before")
    @classmethod
    def _resolve_created_at(cls, value: Any) -> datetime | None:
        return resolve_timestamp(value)

    def to_document(self) -> dict[str, Any]:
        """Serialize including the id, which lives inside the list entry."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ProductDraft(CatalogDocument):
    """Product fields supplied by the caller at creation time."""

    sku: str
    category_id: str
    subcategory_id: str
    fabric_type_id: str
    price: float = 0
    main_image_path: str = ""
    color_variants: list[ColorVariant] = Field(default_factory=list)
    created_by: str
    description: str | None = None
    panno: str | None = None

    def to_document(self) -> dict[str, Any]:
        """Serialize every field, dropping optional ones left as None."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Product(CatalogDocument):
    """Product document.

    ``fabric_type_id`` and ``price`` apply to every variant. ``panno`` is
    only populated for products in the embroidery category.
    """

    id: str | None = None
    sku: str = ""
    category_id: str = ""
    subcategory_id: str = ""
    fabric_type_id: str = ""
    price: float = 0
    main_image_path: str = ""
    color_variants: list[ColorVariant] = Field(default_factory=list)
    created_by: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    description: str | None = None
    panno: str | None = None

    @field_validator("color_variants", mode="before")
    @classmethod
    def _normalize_variants(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _resolve_timestamps(cls, value: Any) -> datetime | None:
        return resolve_timestamp(value)

    @property
    def created_at_epoch(self) -> float:
        """Creation time in epoch seconds; unresolvable counts as zero."""
        return self.created_at.timestamp() if self.created_at else 0.0

    def get_variant(self, variant_id: str) -> ColorVariant | None:
        """Find an embedded variant by id.

        Args:
            variant_id: Variant id.

        Returns:
            The variant, or None if the list has no such entry.
        """
        for variant in self.color_variants:
            if variant.id == variant_id:
                return variant
        return None


class UserRecord(CatalogDocument):
    """Role record kept at ``users/{uid}``."""

    role: Role | None = None

    @field_validator("role", mode="before")
    @classmethod
    def _ignore_unknown_role(cls, value: Any) -> Any:
        if isinstance(value, Role):
            return value
        if isinstance(value, str) and value in ROLE_VALUES:
            return value
        return None


class AppUser(BaseModel):
    """Signed-in user with resolved role."""

    uid: str
    email: str | None = None
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        """Whether the user holds the admin role."""
        return self.role == Role.ADMIN
