"""
Money helpers.

Amounts travel through the engine as integer cents. Conversion from the
NUMERIC columns happens once, at the data store boundary.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENTS = Decimal("0.01")

Number = Union[int, float, str, Decimal]


def to_cents(amount: Number) -> int:
    """Convert a currency amount to integer cents, rounding half up."""
    if amount is None:
        return 0
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return int((value.quantize(CENTS, rounding=ROUND_HALF_UP) * 100).to_integral_value())


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENTS)


def line_revenue(unit_price_cents: int, quantity: int) -> int:
    return unit_price_cents * quantity


def divide_cents(total: int, count: int) -> int:
    """Integer division of a cents amount, rounded half up. 0 when count is 0."""
    if count <= 0:
        return 0
    quotient = (Decimal(total) / Decimal(count)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(quotient)


def format_currency(cents: int, symbol: str = "$") -> str:
    """Render cents as a currency string, e.g. 123456 -> "$1,234.56"."""
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol}{from_cents(abs(cents)):,.2f}"
