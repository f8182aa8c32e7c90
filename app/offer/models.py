"""
==============================================================================
Offer Models Module
==============================================================================

Immutable value types for the offer collection and the structural update
helpers that produce new collections from old ones.

Collection Shape:
----------------
    rows: Tuple[ProductRow, ...]          (display order = offer order)
      └── ProductRow.variants: Tuple[Variant, ...]

A row is either *bound* (its id is a catalog product id) or an unbound
placeholder (its id is a locally generated ``row-<hex>`` string).

Rows are never mutated in place. ``update_row`` / ``update_variant`` look
the target up by id and return a new tuple, leaving the input untouched.

==============================================================================
"""

from __future__ import annotations

import enum
import uuid
from decimal import Decimal
from typing import Callable, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from app.catalog.models import CatalogVariant, Identifier, ProductImage, same_id
from app.core import exceptions


class DiscountType(str, enum.Enum):
    """
    Discount type enumeration.

    - PERCENT: Value is a percentage of the price (0-100)
    - FIXED: Value is an absolute amount off the price
    """

    PERCENT = "percent"
    FIXED = "fixed"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value


# Row-level discount defaults for freshly bound or placeholder rows
DEFAULT_ROW_DISCOUNT = Decimal("0")
DEFAULT_DISCOUNT_TYPE = DiscountType.PERCENT


class Variant(BaseModel):
    """
    Variant attached to an offer row.

    Price and inventory are copied from the catalog and read-only here;
    the discount pair is the operator's annotation.
    """

    model_config = ConfigDict(frozen=True)

    id: Identifier
    title: str = ""
    price: Decimal = Decimal("0")
    inventory: int = Field(default=0, ge=0)
    discount_value: Optional[Decimal] = None
    discount_type: DiscountType = DEFAULT_DISCOUNT_TYPE

    @classmethod
    def from_catalog(cls, stub: CatalogVariant) -> Variant:
        """Build a variant with fresh (empty) discount state."""
        return cls(
            id=stub.id,
            title=stub.title or "",
            price=stub.price,
            inventory=stub.inventory,
        )

    def to_stub(self) -> CatalogVariant:
        """Strip the discount annotation, keeping catalog data only."""
        return CatalogVariant(
            id=self.id,
            title=self.title,
            price=self.price,
            inventory=self.inventory,
        )


class ProductRow(BaseModel):
    """
    One product entry of the offer.

    Attributes:
        id: Catalog product id when bound, placeholder id otherwise
        bound: Whether the row references a catalog product
        title: Product title (empty when unbound)
        image: Product image (optional)
        variants: Ordered variants, ids unique within the row
        discount_value: Row-level discount
        discount_type: Row-level discount type
        show_discount: Whether the discount editor is revealed
    """

    model_config = ConfigDict(frozen=True)

    id: Identifier
    bound: bool = False
    title: str = ""
    image: Optional[ProductImage] = None
    variants: Tuple[Variant, ...] = ()
    discount_value: Optional[Decimal] = DEFAULT_ROW_DISCOUNT
    discount_type: DiscountType = DEFAULT_DISCOUNT_TYPE
    show_discount: bool = False

    @property
    def product_id(self) -> Optional[Identifier]:
        """Catalog product id, or None for a placeholder."""
        return self.id if self.bound else None

    def variant_index(self, variant_id: Identifier) -> int:
        """Get position of a variant, or -1."""
        for index, variant in enumerate(self.variants):
            if same_id(variant.id, variant_id):
                return index
        return -1


class SelectionEntry(BaseModel):
    """
    One product chosen inside a picker session with its chosen variants.

    ``variants`` keeps pick order. ``product_id`` is optional only so that
    malformed entries can be represented and skipped at merge time.
    """

    model_config = ConfigDict(frozen=True)

    product_id: Optional[Identifier] = None
    title: str = ""
    image: Optional[ProductImage] = None
    variants: Tuple[CatalogVariant, ...] = ()


# =============================================================================
# ROW CONSTRUCTION
# =============================================================================

def new_placeholder_id() -> str:
    """Generate a locally unique placeholder row id."""
    return f"row-{uuid.uuid4().hex[:12]}"


def placeholder_row(row_id: Optional[str] = None) -> ProductRow:
    """Create an unbound, empty row."""
    return ProductRow(id=row_id or new_placeholder_id())


def row_from_selection(entry: SelectionEntry) -> ProductRow:
    """
    Build a bound row from a selection entry.

    Discount state always starts fresh: row discount defaulted, variant
    discounts empty.
    """
    return ProductRow(
        id=entry.product_id,
        bound=True,
        title=entry.title or "",
        image=entry.image,
        variants=tuple(Variant.from_catalog(stub) for stub in entry.variants),
    )


# =============================================================================
# STRUCTURAL UPDATE HELPERS
# =============================================================================

def find_row_index(rows: Sequence[ProductRow], row_id: Identifier) -> int:
    """Get position of a row by id, or -1."""
    for index, row in enumerate(rows):
        if same_id(row.id, row_id):
            return index
    return -1


def get_row(rows: Sequence[ProductRow], row_id: Identifier) -> ProductRow:
    """Get row by id or raise ROW_NOT_FOUND."""
    index = find_row_index(rows, row_id)
    if index < 0:
        raise exceptions.row_not_found(row_id)
    return rows[index]


def update_row(
    rows: Sequence[ProductRow],
    row_id: Identifier,
    update: Callable[[ProductRow], ProductRow],
) -> Tuple[ProductRow, ...]:
    """
    Return a new collection with one row replaced by ``update(row)``.

    Raises:
        AppException: ROW_NOT_FOUND if no row has the id
    """
    index = find_row_index(rows, row_id)
    if index < 0:
        raise exceptions.row_not_found(row_id)

    updated = list(rows)
    updated[index] = update(rows[index])
    return tuple(updated)


def update_variant(
    rows: Sequence[ProductRow],
    row_id: Identifier,
    variant_id: Identifier,
    update: Callable[[Variant], Variant],
) -> Tuple[ProductRow, ...]:
    """
    Return a new collection with one variant of one row replaced.

    Raises:
        AppException: ROW_NOT_FOUND / VARIANT_NOT_FOUND
    """
    def _apply(row: ProductRow) -> ProductRow:
        index = row.variant_index(variant_id)
        if index < 0:
            raise exceptions.variant_not_found(row_id, variant_id)
        variants = list(row.variants)
        variants[index] = update(variants[index])
        return row.model_copy(update={"variants": tuple(variants)})

    return update_row(rows, row_id, _apply)


def bound_product_ids(
    rows: Sequence[ProductRow],
    skip_index: Optional[int] = None,
) -> set:
    """Collect catalog ids bound to rows, optionally ignoring one position."""
    return {
        row.id
        for index, row in enumerate(rows)
        if row.bound and index != skip_index
    }
