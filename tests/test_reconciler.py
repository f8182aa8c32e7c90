"""
==============================================================================
Collection Reconciler Tests
==============================================================================

Tests for merging picker selections into the offer rows.

==============================================================================
"""

from decimal import Decimal

import pytest

from app.catalog.models import CatalogVariant
from app.core.exceptions import MergeConflictError
from app.offer.models import (
    DiscountType,
    ProductRow,
    SelectionEntry,
    Variant,
    placeholder_row,
)
from app.services.reconciler import CollectionReconciler


def entry(product_id, *variant_ids, title="Product"):
    return SelectionEntry(
        product_id=product_id,
        title=title,
        variants=tuple(CatalogVariant(id=v, title=f"V{v}", price="5.00") for v in variant_ids),
    )


def bound_row(product_id, *variant_ids, discount="10"):
    return ProductRow(
        id=product_id,
        bound=True,
        title=f"Product {product_id}",
        variants=tuple(
            Variant(id=v, title=f"V{v}", discount_value=Decimal("3"), discount_type=DiscountType.FIXED)
            for v in variant_ids
        ),
        discount_value=Decimal(discount),
        discount_type=DiscountType.FIXED,
        show_discount=True,
    )


@pytest.fixture
def reconciler() -> CollectionReconciler:
    return CollectionReconciler()


class TestAppendMode:
    """Append mode adds one row per selection entry."""

    def test_appends_in_selection_order(self, reconciler):
        """Test rows are appended in pick order with fresh discount state."""
        rows = (bound_row(1, 10),)

        merged = reconciler.merge(rows, [entry(7, 70, 71), entry(8, 80)])

        assert [r.id for r in merged] == [1, 7, 8]
        assert merged[0] is rows[0]
        assert merged[1].bound
        assert [v.id for v in merged[1].variants] == [70, 71]
        assert merged[1].discount_value == Decimal("0")
        assert merged[1].discount_type == DiscountType.PERCENT
        assert merged[1].variants[0].discount_value is None

    def test_empty_selection_is_noop(self, reconciler):
        """Test confirming nothing leaves the rows as they were."""
        rows = (placeholder_row(),)
        assert reconciler.merge(rows, []) == rows

    def test_skips_products_already_bound(self, reconciler):
        """Test a product bound to an existing row is not added again."""
        rows = (bound_row(1, 10),)

        merged = reconciler.merge(rows, [entry(1, 10), entry(2, 20)])

        assert [r.id for r in merged] == [1, 2]

    def test_input_untouched(self, reconciler):
        """Test the input collection is not modified."""
        rows = [placeholder_row()]
        reconciler.merge(rows, [entry(7, 70)])
        assert len(rows) == 1


class TestEditMode:
    """Edit mode replaces the edited row in place."""

    def test_matching_entry_replaces_in_place(self, reconciler):
        """Test editing keeps the slot and takes the new variant set."""
        rows = (bound_row(1, 10), bound_row(2, 20, 21), bound_row(3, 30))

        merged = reconciler.merge(
            rows, [entry(2, 21), entry(9, 90)],
            editing_index=1, original_product_id=2,
        )

        assert [r.id for r in merged] == [1, 2, 3, 9]
        assert [v.id for v in merged[1].variants] == [21]
        assert merged[1].discount_value == Decimal("0")
        assert merged[1].show_discount is False

    def test_placeholder_filled_by_first_entry(self, reconciler):
        """Test a placeholder row is bound to the first selection entry."""
        placeholder = placeholder_row()
        rows = (bound_row(1, 10), placeholder)

        merged = reconciler.merge(
            rows, [entry(5, 50), entry(6, 60)],
            editing_index=1, original_product_id=None,
        )

        assert [r.id for r in merged] == [1, 5, 6]

    def test_swapped_product_takes_slot(self, reconciler):
        """Test unpicking the original product and picking another one."""
        rows = (bound_row(1, 10), bound_row(2, 20))

        merged = reconciler.merge(
            rows, [entry(4, 40)],
            editing_index=0, original_product_id=1,
        )

        assert [r.id for r in merged] == [4, 2]

    def test_empty_selection_collapses_row(self, reconciler):
        """Test clearing an edited row keeps an unbound row in its slot."""
        rows = (bound_row(1, 10), bound_row(2, 20))

        merged = reconciler.merge(rows, [], editing_index=0, original_product_id=1)

        assert len(merged) == 2
        assert merged[0].bound is False
        assert merged[0].variants == ()
        assert str(merged[0].id).startswith("row-")
        assert merged[0].discount_value == Decimal("10")
        assert merged[1] is rows[1]

    def test_collapsed_placeholder_keeps_id(self, reconciler):
        """Test an unbound row cleared again keeps its id."""
        placeholder = placeholder_row("row-fixed")

        merged = reconciler.merge((placeholder,), [], editing_index=0)

        assert merged[0].id == "row-fixed"

    def test_out_of_range_index(self, reconciler):
        """Test a stale editing index raises and changes nothing."""
        rows = (bound_row(1, 10),)

        with pytest.raises(MergeConflictError):
            reconciler.merge(rows, [entry(2, 20)], editing_index=3, original_product_id=1)

    def test_product_bound_elsewhere_skipped(self, reconciler):
        """Test an entry bound to another row is not duplicated."""
        rows = (bound_row(1, 10), bound_row(2, 20))

        merged = reconciler.merge(
            rows, [entry(2, 20), entry(1, 11)],
            editing_index=0, original_product_id=1,
        )

        assert [r.id for r in merged] == [1, 2]
        assert [v.id for v in merged[0].variants] == [11]


class TestMalformedEntries:
    """Malformed entries are skipped without failing the merge."""

    def test_skips_missing_id_and_empty_variants(self, reconciler):
        """Test entries without product id or variants are dropped."""
        merged = reconciler.merge(
            (),
            [SelectionEntry(product_id=None, variants=(CatalogVariant(id=1),)),
             SelectionEntry(product_id=3),
             entry(4, 40)],
        )

        assert [r.id for r in merged] == [4]

    def test_accepts_and_validates_dicts(self, reconciler):
        """Test plain dict entries are coerced, invalid ones skipped."""
        merged = reconciler.merge(
            (),
            [{"product_id": 5, "title": "Mug", "variants": [{"id": 50}]},
             {"product_id": 6, "variants": "not-a-list"}],
        )

        assert [r.id for r in merged] == [5]
        assert merged[0].title == "Mug"

    def test_duplicate_variants_deduped(self, reconciler):
        """Test repeated variant ids keep the first occurrence."""
        merged = reconciler.merge((), [entry(5, 50, 51, 50)])

        assert [v.id for v in merged[0].variants] == [50, 51]

    def test_repeated_product_skipped(self, reconciler):
        """Test the same product twice yields one row."""
        merged = reconciler.merge((), [entry(5, 50), entry("5", 51)])

        assert len(merged) == 1
        assert [v.id for v in merged[0].variants] == [50]
