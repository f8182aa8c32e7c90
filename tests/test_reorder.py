"""
==============================================================================
Reorder Tests
==============================================================================
"""

import pytest

from app.utils.reorder import move, move_by_key


class TestMove:
    """Tests for index-based moves."""

    def test_move_forward(self):
        """Test moving an element towards the end."""
        assert move(["a", "b", "c", "d"], 0, 2) == ["b", "c", "a", "d"]

    def test_move_backward(self):
        """Test moving an element towards the start."""
        assert move(["a", "b", "c", "d"], 3, 1) == ["a", "d", "b", "c"]

    def test_same_index_is_identity(self):
        """Test from == to returns an equal copy."""
        source = ["a", "b", "c"]
        result = move(source, 1, 1)
        assert result == source
        assert result is not source

    def test_source_untouched(self):
        """Test the input sequence is not modified."""
        source = ("a", "b", "c")
        move(source, 0, 2)
        assert source == ("a", "b", "c")

    def test_preserves_multiset(self):
        """Test every element survives a move."""
        source = list(range(7))
        for start in range(7):
            for end in range(7):
                assert sorted(move(source, start, end)) == source

    def test_adjacent_swap_round_trip(self):
        """Test moving to a neighbour and back restores the order."""
        source = ["a", "b", "c", "d", "e"]
        for index in range(len(source) - 1):
            swapped = move(source, index, index + 1)
            assert swapped != source
            assert move(swapped, index + 1, index) == source

    @pytest.mark.parametrize("start,end", [(-1, 0), (0, -1), (3, 0), (0, 3)])
    def test_out_of_range(self, start, end):
        """Test negative and too-large indices raise IndexError."""
        with pytest.raises(IndexError):
            move(["a", "b", "c"], start, end)


class TestMoveByKey:
    """Tests for drag-gesture moves."""

    def test_moves_by_key(self):
        """Test active element lands at the hovered position."""
        items = [{"id": 1}, {"id": 2}, {"id": 3}]
        result = move_by_key(items, 3, 1, key=lambda item: item["id"])
        assert [item["id"] for item in result] == [3, 1, 2]

    def test_unknown_key_is_noop(self):
        """Test ids from another list leave the order unchanged."""
        assert move_by_key(["a", "b"], "a", "z") == ["a", "b"]
        assert move_by_key(["a", "b"], "z", "a") == ["a", "b"]

    def test_same_key_is_noop(self):
        """Test dropping an element on itself."""
        assert move_by_key(["a", "b", "c"], "b", "b") == ["a", "b", "c"]
