# cash_register/services/money.py

"""
Money helpers shared by till and order services.

Decimal everywhere. Values are quantized to 2 places (ROUND_HALF_UP) only
when persisted or displayed; intermediate sums keep full precision.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(v) -> Decimal:
    """Exact Decimal for arithmetic. Raises InvalidOperation on garbage."""
    if v is None or v == "":
        return Decimal("0")
    if isinstance(v, Decimal):
        return v
    if isinstance(v, bool):
        raise InvalidOperation(f"Not a monetary value: {v!r}")
    return Decimal(str(v).strip())


def money(v) -> Decimal:
    return to_decimal(v).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
