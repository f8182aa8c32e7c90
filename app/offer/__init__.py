"""
==============================================================================
Offer Package
==============================================================================

Value types of the upsell offer collection and structural update helpers.

==============================================================================
"""

from .models import (
    DiscountType,
    ProductRow,
    SelectionEntry,
    Variant,
    bound_product_ids,
    find_row_index,
    get_row,
    new_placeholder_id,
    placeholder_row,
    row_from_selection,
    update_row,
    update_variant,
)

__all__ = [
    "DiscountType",
    "ProductRow",
    "SelectionEntry",
    "Variant",
    "bound_product_ids",
    "find_row_index",
    "get_row",
    "new_placeholder_id",
    "placeholder_row",
    "row_from_selection",
    "update_row",
    "update_variant",
]
