"""
==============================================================================
Collection Reconciler Module
==============================================================================

Merges a finished picker session's selections into the committed offer.

Modes:
------
Append mode (no edited row):
    Every selection entry becomes a new row appended at the end, in
    selection order.

Edit mode (one edited row):
    ┌──────────────────────────────────────────────┐
    │ entry matching the row's original product?   │
    └───────────────┬──────────────────────────────┘
            yes     │      no
     ┌──────────────▼──┐   ┌───────────────────────────────┐
     │ replace in place │   │ first other entry takes slot  │
     └──────────────────┘   │ (none left → collapse to an   │
                            │  unbound placeholder)         │
                            └───────────────────────────────┘
    Remaining entries are appended in selection order.

Every bound row built here starts with fresh discount state.

Atomicity:
---------
``merge`` never touches its input and returns a new tuple. It raises
MergeConflictError before building anything if the inputs are
inconsistent, so callers swap the collection only on success.
Malformed entries are skipped and logged, not fatal.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from app.catalog.models import Identifier, same_id
from app.core.exceptions import MergeConflictError
from app.offer.models import (
    ProductRow,
    SelectionEntry,
    bound_product_ids,
    new_placeholder_id,
    row_from_selection,
)


# Module logger
logger = logging.getLogger(__name__)


class CollectionReconciler:
    """
    Merge algorithm committing picker selections into the offer rows.

    Example:
        >>> reconciler = CollectionReconciler()
        >>> rows = reconciler.merge(rows, selection.entries())             # append
        >>> rows = reconciler.merge(rows, entries, editing_index=0,
        ...                         original_product_id=77)               # edit
    """

    def merge(
        self,
        rows: Sequence[ProductRow],
        entries: Iterable[Any],
        editing_index: Optional[int] = None,
        original_product_id: Optional[Identifier] = None,
    ) -> Tuple[ProductRow, ...]:
        """
        Build the collection that results from confirming a picker session.

        Args:
            rows: Current collection
            entries: Selection entries in first-pick order (SelectionEntry
                or plain dicts of the same shape)
            editing_index: Position of the edited row; None for append mode
            original_product_id: Product bound to the edited row when the
                picker opened; None if the row was a placeholder

        Returns:
            New collection

        Raises:
            MergeConflictError: If ``editing_index`` is out of range or the
                result would bind a product twice
        """
        if editing_index is not None and not 0 <= editing_index < len(rows):
            raise MergeConflictError(
                "Edited row no longer exists",
                {"editing_index": editing_index, "rows": len(rows)}
            )

        occupied = {
            str(product_id)
            for product_id in bound_product_ids(rows, skip_index=editing_index)
        }
        valid = self._valid_entries(entries, occupied)

        if editing_index is None:
            merged = list(rows)
            merged.extend(row_from_selection(entry) for entry in valid)
            logger.info(f"Appended {len(valid)} row(s) to offer")
        else:
            merged = self._merge_edit(rows, valid, editing_index, original_product_id)

        self._check_unique(merged)
        return tuple(merged)

    # =========================================================================
    # EDIT MODE
    # =========================================================================

    def _merge_edit(
        self,
        rows: Sequence[ProductRow],
        entries: List[SelectionEntry],
        editing_index: int,
        original_product_id: Optional[Identifier],
    ) -> List[ProductRow]:
        """Replace (or collapse) the edited row, append the rest."""
        match = None
        if original_product_id is not None:
            match = next(
                (e for e in entries if same_id(e.product_id, original_product_id)),
                None
            )

        others = [entry for entry in entries if entry is not match]

        if match is not None:
            slot = row_from_selection(match)
        elif others:
            slot = row_from_selection(others.pop(0))
        else:
            slot = self._collapse(rows[editing_index])

        merged = list(rows)
        merged[editing_index] = slot
        merged.extend(row_from_selection(entry) for entry in others)

        logger.info(
            f"Merged edit of row {editing_index}: "
            f"{'cleared' if not slot.bound else slot.id!r}, "
            f"{len(others)} row(s) appended"
        )
        return merged

    @staticmethod
    def _collapse(row: ProductRow) -> ProductRow:
        """
        Empty a row while keeping its slot.

        A bound row gets a fresh placeholder id so that its former catalog id
        can be bound again later without clashing.
        """
        return row.model_copy(update={
            "id": new_placeholder_id() if row.bound else row.id,
            "bound": False,
            "title": "",
            "image": None,
            "variants": (),
        })

    # =========================================================================
    # ENTRY VALIDATION
    # =========================================================================

    def _valid_entries(self, entries: Iterable[Any], occupied: set) -> List[SelectionEntry]:
        """Coerce entries and drop malformed, duplicate or already-bound ones."""
        valid: List[SelectionEntry] = []
        seen = set()

        for position, raw in enumerate(entries):
            entry = self._coerce(raw, position)
            if entry is None:
                continue

            key = str(entry.product_id)

            if key in seen:
                logger.warning(f"Skipping repeated selection entry for product {entry.product_id!r}")
                continue

            if key in occupied:
                logger.warning(
                    f"Skipping product {entry.product_id!r}: already bound to another row"
                )
                continue

            seen.add(key)
            valid.append(self._dedupe_variants(entry))

        return valid

    @staticmethod
    def _coerce(raw: Any, position: int) -> Optional[SelectionEntry]:
        """Turn a raw entry into a SelectionEntry, or None if malformed."""
        if isinstance(raw, SelectionEntry):
            entry = raw
        else:
            try:
                entry = SelectionEntry.model_validate(raw)
            except ValidationError as e:
                logger.warning(
                    f"Skipping malformed selection entry at position {position}: "
                    f"{e.error_count()} error(s)"
                )
                return None

        if entry.product_id is None or entry.product_id == "":
            logger.warning(f"Skipping selection entry at position {position}: missing product id")
            return None

        if not entry.variants:
            logger.warning(
                f"Skipping selection entry for product {entry.product_id!r}: no variants chosen"
            )
            return None

        return entry

    @staticmethod
    def _dedupe_variants(entry: SelectionEntry) -> SelectionEntry:
        """Keep the first occurrence of each variant id."""
        seen = set()
        variants = []
        for variant in entry.variants:
            key = str(variant.id)
            if key in seen:
                continue
            seen.add(key)
            variants.append(variant)

        if len(variants) == len(entry.variants):
            return entry
        return entry.model_copy(update={"variants": tuple(variants)})

    @staticmethod
    def _check_unique(rows: Sequence[ProductRow]) -> None:
        """Verify no bound product id and no row id appears twice."""
        seen = set()
        for row in rows:
            key = str(row.id)
            if key in seen:
                raise MergeConflictError(
                    "Merge would produce duplicate rows",
                    {"row_id": row.id}
                )
            seen.add(key)
