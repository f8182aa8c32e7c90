"""
==============================================================================
Reorder Utilities Module
==============================================================================

Library-agnostic reordering of ordered sequences.

The same ``move`` is used for the offer's row order and, independently,
for the variant order inside one row. Hosts translate a drag gesture's
source/destination identifiers into indices with ``move_by_key``.

==============================================================================
"""

from __future__ import annotations

from typing import Any, Callable, List, Sequence, TypeVar


T = TypeVar("T")


def move(sequence: Sequence[T], from_index: int, to_index: int) -> List[T]:
    """
    Relocate the element at ``from_index`` so that it occupies ``to_index``.

    Every other element shifts contiguously and keeps its relative order.
    Negative indices are not accepted.

    Args:
        sequence: Source sequence (left untouched)
        from_index: Current position of the element
        to_index: Target position of the element

    Returns:
        New list of the same length

    Raises:
        IndexError: If either index is out of range

    Example:
        >>> move(["a", "b", "c", "d"], 0, 2)
        ['b', 'c', 'a', 'd']
    """
    size = len(sequence)
    for index in (from_index, to_index):
        if not 0 <= index < size:
            raise IndexError(f"index {index} out of range for sequence of length {size}")

    items = list(sequence)
    if from_index == to_index:
        return items

    item = items.pop(from_index)
    items.insert(to_index, item)
    return items


def move_by_key(
    sequence: Sequence[T],
    active_key: Any,
    over_key: Any,
    key: Callable[[T], Any] = lambda item: item,
) -> List[T]:
    """
    Reorder a sequence from a drag gesture's source/destination identifiers.

    Both identifiers are resolved within ``sequence`` only. When they
    resolve to the same element, or either one is not in the sequence,
    the result is an unchanged copy. An element can therefore never be
    moved into another list.
    """
    keys = [key(item) for item in sequence]

    try:
        from_index = keys.index(active_key)
        to_index = keys.index(over_key)
    except ValueError:
        return list(sequence)

    return move(sequence, from_index, to_index)
