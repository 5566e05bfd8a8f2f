"""
Money helpers.

All amounts are Decimal; commissions are rounded to cents.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
# Scale of PercentType columns
PERCENT_STEP = Decimal("0.0001")
ZERO = Decimal("0")


def to_decimal(value: object) -> Decimal:
    """
    Convert a number-like value to Decimal.

    Floats go through str() so 0.1 stays 0.1.

    Args:
        value: int, float, str or Decimal

    Returns:
        Decimal value

    Raises:
        ValueError: If value is not a finite number
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Not a number: {value!r}") from exc
    else:
        raise ValueError(f"Not a number: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def round2(value: Decimal) -> Decimal:
    """Round to two decimal places, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_percent(value: Decimal) -> Decimal:
    """Round a level percent to four decimal places, half up."""
    return value.quantize(PERCENT_STEP, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """
    Calculate round2(amount * percent / 100).

    Args:
        amount: Base amount
        percent: Percentage (5 means 5%)

    Returns:
        Amount rounded to cents
    """
    return round2(amount * percent / Decimal("100"))
