"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Offer: Offer row, discount, reorder and picker schemas

==============================================================================
"""

from .offer import (
    DiscountUpdate,
    ReorderRequest,
    OpenPickerRequest,
    SearchRequest,
    ToggleVariantRequest,
    ToggleProductRequest,
    VariantResponse,
    RowResponse,
    OfferResponse,
    SingleRowResponse,
    ProductBrief,
    SelectionBrief,
    PickerDetail,
    PickerResponse,
    ToggleResponse,
)

__all__ = [
    # Offer
    "DiscountUpdate",
    "ReorderRequest",
    "OpenPickerRequest",
    "SearchRequest",
    "ToggleVariantRequest",
    "ToggleProductRequest",
    "VariantResponse",
    "RowResponse",
    "OfferResponse",
    "SingleRowResponse",
    "ProductBrief",
    "SelectionBrief",
    "PickerDetail",
    "PickerResponse",
    "ToggleResponse",
]
