"""
==============================================================================
Offer Builder Service Module
==============================================================================

In-memory state manager behind the offer editor.

This module implements:
- PickerSession: One open product-picker dialog
- OfferBuilder: Owns the offer rows and at most one picker session

Flow:
-----
    open_picker(editing_index?)
        │  exclusions = products bound to *other* rows (edit mode only)
        │  selection  = edited row's product + variants (edit mode only)
        ▼
    search(text) / load_more() / retry()        → SearchFeedController
    toggle_variant() / toggle_product()         → SelectionAccumulator
        │
        ├── close_picker()   → selection discarded
        └── confirm_picker() → CollectionReconciler → new rows

Row operations (add/remove/discount/reorder) are synchronous and replace
the rows tuple in one assignment, so no two mutations interleave on the
event loop.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

from app.catalog.models import CatalogProduct, Identifier
from app.core import exceptions
from app.core.exceptions import MergeConflictError
from app.offer.models import (
    ProductRow,
    SelectionEntry,
    Variant,
    bound_product_ids,
    find_row_index,
    get_row,
    placeholder_row,
    update_row,
    update_variant,
)
from app.schemas.offer import DiscountUpdate
from app.services.reconciler import CollectionReconciler
from app.services.search_feed import CatalogSource, SearchFeedController, SearchPageState
from app.services.selection import SelectionAccumulator
from app.utils.reorder import move, move_by_key
from app.utils.validators import DiscountValidator


# Module logger
logger = logging.getLogger(__name__)


class PickerSession:
    """
    State of one open picker dialog.

    Attributes:
        editing_row_id: Id of the edited row (None in append mode)
        original_product_id: Product bound to the edited row at open time
        selection: Chosen (product, variant) pairs
        feed: Search feed of this session
    """

    def __init__(
        self,
        feed: SearchFeedController,
        editing_row_id: Optional[Identifier] = None,
        original_product_id: Optional[Identifier] = None,
    ) -> None:
        self.feed = feed
        self.editing_row_id = editing_row_id
        self.original_product_id = original_product_id
        self.selection = SelectionAccumulator()

    @property
    def is_editing(self) -> bool:
        """Check whether the session edits an existing row."""
        return self.editing_row_id is not None

    @property
    def search_state(self) -> SearchPageState:
        """Current search page state."""
        return self.feed.state


class OfferBuilder:
    """
    Presentation-boundary state manager for the upsell offer.

    Attributes:
        rows: Current collection (immutable tuple)
        picker: Open picker session, if any

    Example:
        >>> builder = OfferBuilder(catalog)
        >>> await builder.open_picker(editing_index=0)
        >>> builder.toggle_variant(77, 1)
        >>> builder.confirm_picker()
        >>> builder.set_discount(77, {"discount_value": 15})
    """

    def __init__(
        self,
        source: CatalogSource,
        page_size: int = 10,
        debounce_seconds: float = 0.5,
        rows: Optional[Tuple[ProductRow, ...]] = None,
    ) -> None:
        """
        Initialize the builder with one placeholder row.

        Args:
            source: Catalog search collaborator for picker sessions
            page_size: Products per search page
            debounce_seconds: Quiet interval before a typed query fires
            rows: Initial rows (defaults to one unbound placeholder)
        """
        self._source = source
        self._page_size = page_size
        self._debounce_seconds = debounce_seconds
        self._rows: Tuple[ProductRow, ...] = tuple(rows) if rows is not None else (placeholder_row(),)
        self._picker: Optional[PickerSession] = None
        self._reconciler = CollectionReconciler()
        self._discounts = DiscountValidator()

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def rows(self) -> Tuple[ProductRow, ...]:
        """Current offer rows."""
        return self._rows

    @property
    def picker(self) -> Optional[PickerSession]:
        """Open picker session, if any."""
        return self._picker

    def editing_index(self) -> Optional[int]:
        """Current position of the row the open picker edits."""
        if self._picker is None or not self._picker.is_editing:
            return None
        index = find_row_index(self._rows, self._picker.editing_row_id)
        return index if index >= 0 else None

    # =========================================================================
    # ROW OPERATIONS
    # =========================================================================

    def add_row(self) -> ProductRow:
        """Append an unbound placeholder row."""
        row = placeholder_row()
        self._rows = self._rows + (row,)
        logger.info(f"➕ Added placeholder row {row.id}")
        return row

    def remove_row(self, row_id: Identifier) -> None:
        """
        Remove a row.

        Raises:
            AppException: ROW_NOT_FOUND
        """
        index = find_row_index(self._rows, row_id)
        if index < 0:
            raise exceptions.row_not_found(row_id)

        self._rows = self._rows[:index] + self._rows[index + 1:]
        logger.info(f"🗑️ Removed row {row_id}")

    def set_discount(
        self,
        row_id: Identifier,
        changes: Union[DiscountUpdate, Dict[str, Any]],
        variant_id: Optional[Identifier] = None,
    ) -> ProductRow:
        """
        Edit the discount of a row, or of one variant of it.

        A new value is normalized under the type given in the same change,
        falling back to the stored type. Changing only the type keeps the
        stored value as it is.

        Returns:
            The updated row
        """
        if isinstance(changes, dict):
            changes = DiscountUpdate.model_validate(changes)

        if variant_id is None:
            self._rows = update_row(
                self._rows, row_id, lambda row: self._apply_discount(row, changes)
            )
        else:
            self._rows = update_variant(
                self._rows, row_id, variant_id,
                lambda variant: self._apply_discount(variant, changes)
            )

        return get_row(self._rows, row_id)

    def _apply_discount(
        self,
        target: Union[ProductRow, Variant],
        changes: DiscountUpdate,
    ) -> Union[ProductRow, Variant]:
        provided = changes.model_fields_set
        update: Dict[str, Any] = {}

        discount_type = target.discount_type
        if "discount_type" in provided and changes.discount_type is not None:
            discount_type = changes.discount_type
            update["discount_type"] = discount_type

        if "discount_value" in provided:
            update["discount_value"] = self._discounts.normalize(
                changes.discount_value, discount_type
            )

        if (
            "show_discount" in provided
            and changes.show_discount is not None
            and isinstance(target, ProductRow)
        ):
            update["show_discount"] = changes.show_discount

        return target.model_copy(update=update)

    def remove_variant(self, row_id: Identifier, variant_id: Identifier) -> ProductRow:
        """
        Remove one variant from a row.

        Raises:
            AppException: ROW_NOT_FOUND / VARIANT_NOT_FOUND
        """
        def _drop(row: ProductRow) -> ProductRow:
            index = row.variant_index(variant_id)
            if index < 0:
                raise exceptions.variant_not_found(row_id, variant_id)
            return row.model_copy(
                update={"variants": row.variants[:index] + row.variants[index + 1:]}
            )

        self._rows = update_row(self._rows, row_id, _drop)
        return get_row(self._rows, row_id)

    # =========================================================================
    # REORDERING
    # =========================================================================

    def reorder_rows(self, from_index: int, to_index: int) -> Tuple[ProductRow, ...]:
        """
        Move the row at ``from_index`` to ``to_index``.

        Raises:
            AppException: INVALID_INDEX
        """
        self._check_indices(len(self._rows), from_index, to_index)
        self._rows = tuple(move(self._rows, from_index, to_index))
        return self._rows

    def reorder_variants(self, row_id: Identifier, from_index: int, to_index: int) -> ProductRow:
        """
        Move a variant within its own row.

        Raises:
            AppException: ROW_NOT_FOUND / INVALID_INDEX
        """
        row = get_row(self._rows, row_id)
        self._check_indices(len(row.variants), from_index, to_index)

        self._rows = update_row(
            self._rows, row_id,
            lambda r: r.model_copy(
                update={"variants": tuple(move(r.variants, from_index, to_index))}
            )
        )
        return get_row(self._rows, row_id)

    def move_row(self, active_id: Identifier, over_id: Identifier) -> Tuple[ProductRow, ...]:
        """Apply a row drag gesture given the dragged and hovered row ids."""
        self._rows = tuple(
            move_by_key(self._rows, str(active_id), str(over_id), key=lambda r: str(r.id))
        )
        return self._rows

    def move_variant(
        self,
        row_id: Identifier,
        active_id: Identifier,
        over_id: Identifier,
    ) -> ProductRow:
        """
        Apply a variant drag gesture inside one row.

        Ids that are not variants of this row leave it unchanged.
        """
        self._rows = update_row(
            self._rows, row_id,
            lambda r: r.model_copy(update={"variants": tuple(
                move_by_key(r.variants, str(active_id), str(over_id), key=lambda v: str(v.id))
            )})
        )
        return get_row(self._rows, row_id)

    @staticmethod
    def _check_indices(size: int, *indices: int) -> None:
        for index in indices:
            if not 0 <= index < size:
                raise exceptions.invalid_index(index, size)

    # =========================================================================
    # PICKER SESSION
    # =========================================================================

    async def open_picker(self, editing_index: Optional[int] = None) -> PickerSession:
        """
        Open the product picker and load the first result page.

        In edit mode products bound to other rows are excluded from results
        and the edited row's product is pre-selected with its variants.

        Args:
            editing_index: Row being edited; None to append new rows

        Raises:
            AppException: INVALID_INDEX
        """
        if self._picker is not None:
            logger.info("Replacing open picker session")
            self._close()

        feed = SearchFeedController(
            self._source,
            page_size=self._page_size,
            debounce_seconds=self._debounce_seconds,
        )

        if editing_index is None:
            session = PickerSession(feed)
            feed.open()
        else:
            self._check_indices(len(self._rows), editing_index)
            row = self._rows[editing_index]
            session = PickerSession(
                feed,
                editing_row_id=row.id,
                original_product_id=row.product_id,
            )
            feed.open(bound_product_ids(self._rows, skip_index=editing_index))

            if row.bound and row.variants:
                session.selection.seed(SelectionEntry(
                    product_id=row.id,
                    title=row.title,
                    image=row.image,
                    variants=tuple(v.to_stub() for v in row.variants),
                ))

        self._picker = session
        logger.info(
            f"🔍 Picker opened ({'edit row ' + str(editing_index) if session.is_editing else 'append'}, "
            f"{len(feed.exclusions)} exclusion(s))"
        )

        await feed.load_next_page()
        return session

    def _require_picker(self) -> PickerSession:
        if self._picker is None:
            raise exceptions.picker_not_open()
        return self._picker

    def search(self, text: str) -> None:
        """Debounce a new search query for the open picker."""
        self._require_picker().feed.set_query(text)

    async def load_more(self) -> SearchPageState:
        """Load the next result page of the open picker."""
        return await self._require_picker().feed.load_next_page()

    async def retry(self) -> SearchPageState:
        """Retry the failed (or stuck) request of the open picker."""
        return await self._require_picker().feed.retry()

    def toggle_variant(self, product_id: Identifier, variant_id: Identifier) -> bool:
        """
        Flip one variant of a product in the open picker.

        Returns:
            True if the variant is chosen after the call

        Raises:
            AppException: PICKER_NOT_OPEN / PRODUCT_EXCLUDED /
                PRODUCT_NOT_LOADED / VARIANT_NOT_LOADED
        """
        session = self._require_picker()
        product = self._resolve_product(session, product_id)

        variant = product.find_variant(variant_id)
        if variant is None:
            raise exceptions.variant_not_loaded(product_id, variant_id)

        return session.selection.toggle(product.id, product, variant)

    def toggle_product(self, product_id: Identifier) -> bool:
        """
        Select all variants of a product, or deselect them all.

        Returns:
            True if the variants are chosen after the call
        """
        session = self._require_picker()
        product = self._resolve_product(session, product_id)
        return session.selection.toggle_all(product)

    def _resolve_product(self, session: PickerSession, product_id: Identifier) -> CatalogProduct:
        """Find a pickable product among loaded results or the selection."""
        if session.feed.is_excluded(product_id):
            raise exceptions.product_excluded(product_id)

        product = session.feed.state.find_product(product_id)
        if product is not None:
            return product

        # Seeded entries may not be on a loaded page yet
        entry = session.selection.get(product_id)
        if entry is not None:
            return CatalogProduct(
                id=entry.product_id,
                title=entry.title,
                image=entry.image,
                variants=list(entry.variants),
            )

        raise exceptions.product_not_loaded(product_id)

    def close_picker(self) -> None:
        """Close the picker, discarding its selection."""
        self._require_picker()
        self._close()
        logger.info("Picker closed without changes")

    def confirm_picker(self) -> Tuple[ProductRow, ...]:
        """
        Merge the picker selection into the offer and close the picker.

        On MergeConflictError the rows are left untouched and the picker
        stays open.

        Returns:
            New rows
        """
        session = self._require_picker()

        editing_index = None
        if session.is_editing:
            editing_index = find_row_index(self._rows, session.editing_row_id)
            if editing_index < 0:
                raise MergeConflictError(
                    "Edited row was removed while the picker was open",
                    {"row_id": session.editing_row_id}
                )

        entries = session.selection.entries()
        self._rows = self._reconciler.merge(
            self._rows,
            entries,
            editing_index=editing_index,
            original_product_id=session.original_product_id,
        )

        self._close()
        logger.info(f"✅ Picker confirmed: {len(entries)} product(s), {len(self._rows)} row(s) in offer")
        return self._rows

    def _close(self) -> None:
        if self._picker is not None:
            self._picker.feed.close()
            self._picker = None
