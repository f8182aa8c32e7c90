"""
==============================================================================
Validation Utilities Module
==============================================================================

Normalization of operator input.

This module implements:
- DiscountValidator: Normalizes discount amounts against a discount type

Normalization Rules for Discounts:
---------------------------------
- Empty input (None or blank string) stays empty (None)
- Non-numeric input is treated as empty
- Numeric input is clamped to [0, ∞)
- Percent discounts are additionally clamped to [0, 100]

Invalid input is never rejected with an error; it is normalized.

==============================================================================
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from app.offer.models import DiscountType


class DiscountValidator:
    """
    Normalizer for discount values.

    Example:
        >>> validator = DiscountValidator()
        >>> validator.normalize("150", DiscountType.PERCENT)
        Decimal('100')
        >>> validator.normalize(-5, DiscountType.FIXED)
        Decimal('0')
        >>> validator.normalize("", DiscountType.PERCENT) is None
        True
    """

    MIN_VALUE = Decimal("0")
    MAX_PERCENT = Decimal("100")

    def normalize(self, raw_value: Any, discount_type: DiscountType) -> Optional[Decimal]:
        """
        Normalize a raw discount entry.

        Args:
            raw_value: Value as typed by the operator (str, int, float, Decimal)
            discount_type: Type the value is interpreted under

        Returns:
            Clamped Decimal, or None when no discount is configured
        """
        value = self._to_decimal(raw_value)
        if value is None:
            return None

        value = max(self.MIN_VALUE, value)

        if DiscountType(discount_type) == DiscountType.PERCENT:
            value = min(self.MAX_PERCENT, value)

        return value

    @staticmethod
    def _to_decimal(raw_value: Any) -> Optional[Decimal]:
        """Parse a raw value, returning None for empty or non-numeric input."""
        if raw_value is None or isinstance(raw_value, bool):
            return None

        if isinstance(raw_value, str):
            raw_value = raw_value.strip()
            if not raw_value:
                return None

        if isinstance(raw_value, float):
            raw_value = repr(raw_value)

        try:
            value = Decimal(raw_value)
        except (InvalidOperation, TypeError, ValueError):
            return None

        if not value.is_finite():
            return None

        return value


_discount_validator = DiscountValidator()


def normalize_discount(raw_value: Any, discount_type: DiscountType) -> Optional[Decimal]:
    """Module-level shortcut for DiscountValidator().normalize()."""
    return _discount_validator.normalize(raw_value, discount_type)
