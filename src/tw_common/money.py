"""Decimal money utilities for taka-denominated wallet balances.

All amounts are Decimal with exactly 2 fractional digits (NUMERIC(12, 2) in DB).
Never float.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | str) -> Decimal:
    """Normalise to a 2-decimal Decimal. Raises ValueError on garbage input."""
    try:
        return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a valid money amount: {value!r}") from e


def money_to_display(amount: Decimal) -> str:
    """Convert to display string: 1500 -> '৳1,500.00', -200 -> '-৳200.00'."""
    amount = to_money(amount)
    if amount < 0:
        return f"-৳{-amount:,.2f}"
    return f"৳{amount:,.2f}"
