"""
==============================================================================
Utilities Package
==============================================================================

Pure helpers shared by the services.

Modules:
--------
- validators: Discount normalization
- reorder: Move an element of an ordered sequence

==============================================================================
"""

from .validators import DiscountValidator, normalize_discount
from .reorder import move, move_by_key

__all__ = [
    "DiscountValidator",
    "normalize_discount",
    "move",
    "move_by_key",
]
