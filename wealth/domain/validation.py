"""Input coercion and range checks shared by the allocation engine.

Every public engine function validates its inputs up front and raises
``InvalidInputError``; values are never clamped into range.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from wealth.exceptions import InvalidInputError

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Coerce a numeric value to Decimal.

    Floats go through ``str()`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. Booleans are rejected.
    """

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise InvalidInputError(f"{field_name} must be a number, got {value!r}")
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise InvalidInputError(f"{field_name} must be a number, got {value!r}") from e
    else:
        raise InvalidInputError(f"{field_name} must be a number, got {type(value).__name__}")

    if not result.is_finite():
        raise InvalidInputError(f"{field_name} must be finite, got {value!r}")
    return result


def validate_non_negative(value: Any, field_name: str) -> Decimal:
    amount = to_decimal(value, field_name)
    if amount < ZERO:
        raise InvalidInputError(f"{field_name} must be non-negative, got {amount}")
    return amount


def validate_percent(value: Any, field_name: str) -> Decimal:
    """Validate a 0-100 percentage (percentage points, not a fraction)."""

    pct = to_decimal(value, field_name)
    if pct < ZERO or pct > HUNDRED:
        raise InvalidInputError(f"{field_name} must be between 0 and 100, got {pct}")
    return pct


def validate_threshold(threshold: Any) -> Decimal:
    return validate_percent(threshold, "threshold")


def validate_cash_amount(cash_amount: Any) -> Decimal:
    return validate_non_negative(cash_amount, "cash_amount")
