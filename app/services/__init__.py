"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes implementing the offer editor logic.

This package provides:
- SelectionAccumulator: Variants chosen inside one picker session
- SearchFeedController: Debounced, paginated catalog search
- CollectionReconciler: Merges picker selections into the offer
- OfferBuilder: Offer rows plus the open picker session

Architecture Pattern: Service Layer
----------------------------------
    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │  OfferBuilder   │  ← Row operations, picker session
    └────────┬────────┘
             │
    ┌────────▼─────────────────────────────────────┐
    │ SearchFeedController │ SelectionAccumulator  │
    │ CollectionReconciler                         │
    └────────┬─────────────────────────────────────┘
             │
    ┌────────▼────────┐
    │ Catalog source  │  ← ProductCatalog / CatalogClient
    └─────────────────┘

Usage:
------
    from app.services import OfferBuilder

    builder = OfferBuilder(catalog, page_size=10)
    await builder.open_picker()
    builder.toggle_variant(77, 1)
    builder.confirm_picker()

==============================================================================
"""

from .selection import SelectionAccumulator
from .search_feed import (
    CatalogSource,
    FeedStatus,
    SearchFeedController,
    SearchPageState,
)
from .reconciler import CollectionReconciler
from .offer_builder import OfferBuilder, PickerSession

__all__ = [
    "SelectionAccumulator",
    "CatalogSource",
    "FeedStatus",
    "SearchFeedController",
    "SearchPageState",
    "CollectionReconciler",
    "OfferBuilder",
    "PickerSession",
]
