"""
==============================================================================
Selection Accumulator Module
==============================================================================

Tracks which (product, variant) pairs are chosen inside one open picker
session, independent of what is already committed to the offer.

Ordering:
--------
- Products keep first-pick order. A product removed because its last
  variant was unpicked goes to the end if picked again.
- Variants inside a product keep pick order, not catalog order.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from app.catalog.models import CatalogProduct, CatalogVariant, Identifier, same_id
from app.offer.models import SelectionEntry


# Module logger
logger = logging.getLogger(__name__)


class SelectionAccumulator:
    """
    Ordered mapping of product id → chosen variant stubs.

    Example:
        >>> selection = SelectionAccumulator()
        >>> selection.toggle(product.id, product, product.variants[0])
        >>> selection.is_chosen(product.id, product.variants[0].id)
        True
        >>> selection.entries()
        (SelectionEntry(product_id=..., variants=(...)),)
    """

    def __init__(self) -> None:
        """Initialize an empty selection."""
        self._entries: Dict[Identifier, SelectionEntry] = {}

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def selected_count(self) -> int:
        """Number of chosen variants across all products."""
        return sum(len(entry.variants) for entry in self._entries.values())

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def _key(self, product_id: Identifier) -> Optional[Identifier]:
        for key in self._entries:
            if same_id(key, product_id):
                return key
        return None

    def get(self, product_id: Identifier) -> Optional[SelectionEntry]:
        """Get the entry for a product, if any variant of it is chosen."""
        key = self._key(product_id)
        return self._entries[key] if key is not None else None

    def is_chosen(self, product_id: Identifier, variant_id: Identifier) -> bool:
        """Check whether a variant of a product is chosen."""
        entry = self.get(product_id)
        if entry is None:
            return False
        return any(same_id(v.id, variant_id) for v in entry.variants)

    def entries(self) -> Tuple[SelectionEntry, ...]:
        """Snapshot of the selection in first-pick order."""
        return tuple(self._entries.values())

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def toggle(
        self,
        product_id: Identifier,
        product_meta: CatalogProduct,
        variant: CatalogVariant,
    ) -> bool:
        """
        Flip one variant between chosen and not chosen.

        Args:
            product_id: Catalog product id
            product_meta: Product providing title and image for a new entry
            variant: Variant stub to flip

        Returns:
            True if the variant is chosen after the call
        """
        key = self._key(product_id)

        if key is None:
            self._entries[product_id] = SelectionEntry(
                product_id=product_id,
                title=product_meta.title,
                image=product_meta.image,
                variants=(variant,),
            )
            return True

        entry = self._entries[key]
        remaining = tuple(v for v in entry.variants if not same_id(v.id, variant.id))

        if len(remaining) == len(entry.variants):
            self._entries[key] = entry.model_copy(
                update={"variants": entry.variants + (variant,)}
            )
            return True

        if remaining:
            self._entries[key] = entry.model_copy(update={"variants": remaining})
        else:
            del self._entries[key]

        return False

    def toggle_all(self, product: CatalogProduct) -> bool:
        """
        Select every variant of a product, or deselect them all.

        When all variants are already chosen, they are all unchosen;
        otherwise the missing ones are chosen in catalog order.

        Returns:
            True if the variants are chosen after the call
        """
        if not product.variants:
            return False

        all_chosen = all(self.is_chosen(product.id, v.id) for v in product.variants)

        for variant in product.variants:
            if all_chosen or not self.is_chosen(product.id, variant.id):
                self.toggle(product.id, product, variant)

        return not all_chosen

    def seed(self, entry: SelectionEntry) -> None:
        """
        Pre-select an entry (the edited row's product when a picker opens).

        Entries without a product id or variants are ignored.
        """
        if entry.product_id is None or not entry.variants:
            return

        key = self._key(entry.product_id)
        if key is not None:
            del self._entries[key]

        self._entries[entry.product_id] = entry
        logger.debug(
            f"Seeded selection with product {entry.product_id!r} "
            f"({len(entry.variants)} variant(s))"
        )
