"""
==============================================================================
Selection Accumulator Tests
==============================================================================
"""

from app.offer.models import SelectionEntry
from app.services.selection import SelectionAccumulator


class TestToggle:
    """Tests for single-variant toggles."""

    def test_first_toggle_adds_entry(self, products):
        """Test picking a variant creates an entry with product metadata."""
        hoodie = products[0]
        selection = SelectionAccumulator()

        assert selection.toggle(hoodie.id, hoodie, hoodie.variants[1]) is True

        entry = selection.get(77)
        assert entry.title == "Fadeaway Hoodie"
        assert entry.image.src == "https://cdn.example.com/77.png"
        assert [v.id for v in entry.variants] == [2]

    def test_variants_keep_pick_order(self, products):
        """Test variants are kept in the order they were picked."""
        hoodie = products[0]
        selection = SelectionAccumulator()

        selection.toggle(hoodie.id, hoodie, hoodie.variants[2])
        selection.toggle(hoodie.id, hoodie, hoodie.variants[0])

        assert [v.id for v in selection.get(77).variants] == [3, 1]

    def test_toggle_twice_removes_product(self, products):
        """Test unpicking the last variant drops the product."""
        hoodie = products[0]
        selection = SelectionAccumulator()

        selection.toggle(hoodie.id, hoodie, hoodie.variants[0])
        assert selection.toggle(hoodie.id, hoodie, hoodie.variants[0]) is False

        assert selection.get(77) is None
        assert selection.entries() == ()

    def test_repicked_product_goes_to_end(self, products):
        """Test a product removed and picked again loses its position."""
        hoodie, tee = products[0], products[1]
        selection = SelectionAccumulator()

        selection.toggle(hoodie.id, hoodie, hoodie.variants[0])
        selection.toggle(tee.id, tee, tee.variants[0])
        selection.toggle(hoodie.id, hoodie, hoodie.variants[0])
        selection.toggle(hoodie.id, hoodie, hoodie.variants[0])

        assert [e.product_id for e in selection.entries()] == [80, 77]

    def test_string_ids_match(self, products):
        """Test "77" and 77 refer to the same product."""
        hoodie = products[0]
        selection = SelectionAccumulator()

        selection.toggle(hoodie.id, hoodie, hoodie.variants[0])

        assert selection.is_chosen("77", "1")
        assert len(selection.entries()) == 1


class TestToggleAll:
    """Tests for whole-product toggles."""

    def test_selects_missing_variants(self, products):
        """Test toggling a partly picked product picks the rest."""
        hoodie = products[0]
        selection = SelectionAccumulator()
        selection.toggle(hoodie.id, hoodie, hoodie.variants[1])

        assert selection.toggle_all(hoodie) is True
        assert [v.id for v in selection.get(77).variants] == [2, 1, 3]

    def test_deselects_when_all_chosen(self, products):
        """Test toggling a fully picked product clears it."""
        hoodie = products[0]
        selection = SelectionAccumulator()
        selection.toggle_all(hoodie)

        assert selection.toggle_all(hoodie) is False
        assert selection.get(77) is None


class TestSeed:
    """Tests for seeding from an existing row."""

    def test_seed_then_unpick(self, products):
        """Test seeded variants can be unpicked like picked ones."""
        hoodie = products[0]
        selection = SelectionAccumulator()
        selection.seed(SelectionEntry(
            product_id=77,
            title=hoodie.title,
            variants=tuple(hoodie.variants[:2]),
        ))

        assert selection.selected_count == 2
        selection.toggle(77, hoodie, hoodie.variants[0])
        assert [v.id for v in selection.get(77).variants] == [2]

    def test_seed_ignores_empty_entry(self):
        """Test entries without id or variants are ignored."""
        selection = SelectionAccumulator()
        selection.seed(SelectionEntry(product_id=None))
        selection.seed(SelectionEntry(product_id=5))

        assert len(selection.entries()) == 0
