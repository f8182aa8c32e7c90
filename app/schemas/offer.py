"""
==============================================================================
Offer Schemas Module
==============================================================================

Request and response schemas for offer and picker operations.

Includes:
- Discount edits (value is normalized server-side, never rejected)
- Reordering by index or by drag ids
- Picker session snapshots (search state + selection)

Decimals are exposed as floats in responses.

==============================================================================
"""

from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from app.catalog.models import Identifier
from app.offer.models import DiscountType


def _as_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class DiscountUpdate(BaseModel):
    """
    Discount edit for a row or a variant.

    Only the fields present in the request are applied. ``discount_value``
    accepts anything; values that are not numbers clear the discount.
    """
    discount_value: Optional[Any] = None
    discount_type: Optional[DiscountType] = None
    show_discount: Optional[bool] = None

    @model_validator(mode="after")
    def validate_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one discount field must be provided")
        return self


class ReorderRequest(BaseModel):
    """
    Move an element by index, or by the ids of a drag gesture.

    Either ``from_index``/``to_index`` or ``active_id``/``over_id``.
    """
    from_index: Optional[int] = Field(default=None, ge=0)
    to_index: Optional[int] = Field(default=None, ge=0)
    active_id: Optional[Identifier] = None
    over_id: Optional[Identifier] = None

    @model_validator(mode="after")
    def validate_reorder_mode(self):
        by_index = self.from_index is not None or self.to_index is not None
        by_id = self.active_id is not None or self.over_id is not None

        if by_index and by_id:
            raise ValueError("Cannot provide both indices and drag ids")
        if by_index and (self.from_index is None or self.to_index is None):
            raise ValueError("Both from_index and to_index are required")
        if by_id and (self.active_id is None or self.over_id is None):
            raise ValueError("Both active_id and over_id are required")
        if not by_index and not by_id:
            raise ValueError("Either indices or drag ids must be provided")
        return self

    @property
    def by_index(self) -> bool:
        return self.from_index is not None


class OpenPickerRequest(BaseModel):
    """Open the picker to edit a row, or to append new rows."""
    editing_index: Optional[int] = Field(default=None, ge=0)


class SearchRequest(BaseModel):
    """Typed search text."""
    query: str = Field(default="", max_length=200)


class ToggleVariantRequest(BaseModel):
    """Flip one variant of a loaded product."""
    product_id: Identifier
    variant_id: Identifier


class ToggleProductRequest(BaseModel):
    """Select or deselect every variant of a loaded product."""
    product_id: Identifier


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class VariantResponse(BaseModel):
    """Variant of an offer row."""
    id: Identifier
    title: str
    price: float
    inventory: int
    discount_value: Optional[float]
    discount_type: DiscountType

    @classmethod
    def from_model(cls, variant):
        return cls(
            id=variant.id,
            title=variant.title,
            price=float(variant.price),
            inventory=variant.inventory,
            discount_value=_as_float(variant.discount_value),
            discount_type=variant.discount_type
        )


class RowResponse(BaseModel):
    """Offer row with its variants."""
    id: Identifier
    bound: bool
    title: str
    image: Optional[str]
    variants: List[VariantResponse]
    discount_value: Optional[float]
    discount_type: DiscountType
    show_discount: bool

    @classmethod
    def from_model(cls, row):
        return cls(
            id=row.id,
            bound=row.bound,
            title=row.title,
            image=row.image.src if row.image else None,
            variants=[VariantResponse.from_model(v) for v in row.variants],
            discount_value=_as_float(row.discount_value),
            discount_type=row.discount_type,
            show_discount=row.show_discount
        )


class OfferResponse(BaseModel):
    """Whole offer collection."""
    success: bool = Field(default=True)
    rows: List[RowResponse]
    total: int

    @classmethod
    def from_rows(cls, rows):
        return cls(rows=[RowResponse.from_model(r) for r in rows], total=len(rows))


class SingleRowResponse(BaseModel):
    """Single offer row response."""
    success: bool = Field(default=True)
    row: RowResponse


class ProductVariantBrief(BaseModel):
    """Catalog variant as shown in the picker."""
    id: Identifier
    title: str
    price: float
    inventory: int
    selected: bool = False


class ProductBrief(BaseModel):
    """Catalog product as shown in the picker."""
    id: Identifier
    title: str
    image: Optional[str]
    variants: List[ProductVariantBrief]

    @classmethod
    def from_model(cls, product, selection=None):
        return cls(
            id=product.id,
            title=product.title,
            image=product.image.src if product.image else None,
            variants=[
                ProductVariantBrief(
                    id=v.id,
                    title=v.title,
                    price=float(v.price),
                    inventory=v.inventory,
                    selected=selection.is_chosen(product.id, v.id) if selection is not None else False
                )
                for v in product.variants
            ]
        )


class SelectionBrief(BaseModel):
    """Product chosen in the picker with its chosen variant ids."""
    product_id: Identifier
    title: str
    variant_ids: List[Identifier]

    @classmethod
    def from_model(cls, entry):
        return cls(
            product_id=entry.product_id,
            title=entry.title,
            variant_ids=[v.id for v in entry.variants]
        )


class PickerDetail(BaseModel):
    """Snapshot of an open picker session."""
    editing_row_id: Optional[Identifier]
    editing_index: Optional[int]
    query: str
    status: str
    page: int
    page_size: int
    exhausted: bool
    error: Optional[str]
    retryable: bool
    pending_query: bool
    results: List[ProductBrief]
    selection: List[SelectionBrief]
    selected_count: int
    excluded_ids: List[str]

    @classmethod
    def from_session(cls, session, editing_index=None):
        state = session.feed.state
        return cls(
            editing_row_id=session.editing_row_id,
            editing_index=editing_index,
            query=state.query,
            status=str(state.status),
            page=state.cursor,
            page_size=session.feed.page_size,
            exhausted=state.exhausted,
            error=state.error,
            retryable=state.retryable,
            pending_query=session.feed.has_pending_query,
            results=[ProductBrief.from_model(p, session.selection) for p in state.results],
            selection=[SelectionBrief.from_model(e) for e in session.selection.entries()],
            selected_count=session.selection.selected_count,
            excluded_ids=sorted(session.feed.exclusions)
        )


class PickerResponse(BaseModel):
    """Picker state response (``picker`` is None when closed)."""
    success: bool = Field(default=True)
    open: bool
    picker: Optional[PickerDetail] = None


class ToggleResponse(BaseModel):
    """Result of a selection toggle."""
    success: bool = Field(default=True)
    product_id: Identifier
    selected: bool
    selected_count: int
