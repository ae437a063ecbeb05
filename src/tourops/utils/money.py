"""Fail-soft numeric parsing for prices, percentages and quantities.

Form fields arrive as free text and are frequently blank while a proposal is
still being edited. Every reader of a price, percentage or quantity field goes
through this module so that the "unparsable means zero" rule lives in one place.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")
# Largest accepted power of ten in a numeric field
MAX_MAGNITUDE = 12


def _to_decimal(value: Any) -> Decimal | None:
    """Convert a raw field value to a finite Decimal, or None if it is not a number.

    Values of 10**13 and above count as not a number, so exponent input like
    "1e999999999" can never reach integer conversion or decimal arithmetic.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    else:
        text = str(value).strip()
        if not text:
            return None

        # Remove currency symbols, thousands separators and percent signs
        text = re.sub(r"[$€£¥%]", "", text)
        text = text.replace(",", "").strip()

        try:
            number = Decimal(text)
        except InvalidOperation:
            return None

    if not number.is_finite() or number.adjusted() > MAX_MAGNITUDE:
        return None
    return number


def parse_money(value: Any) -> Decimal:
    """Parse a unit price into a non-negative Decimal.

    Handles "100", "100.50", "$1,200", 100 and Decimal("100").

    Args:
        value: Raw price field value (usually a string typed by a user)

    Returns:
        Parsed amount, or Decimal("0") if empty, malformed or negative
    """
    number = _to_decimal(value)
    if number is None or number < 0:
        return ZERO
    return number


def parse_percent(value: Any) -> Decimal:
    """Parse a percentage field such as "15" or "15%".

    Returns the percentage as written (15 for "15"), or 0 when unparsable.
    Use :func:`percent_rate` for the fraction.
    """
    number = _to_decimal(value)
    if number is None:
        return ZERO
    return number


def percent_rate(value: Any) -> Decimal:
    """Return a percentage field as a fraction ("15" -> 0.15), 0 when unparsable."""
    return parse_percent(value) / HUNDRED


def parse_quantity(value: Any, default: int = 1) -> int:
    """Parse a quantity field (nights, rooms, days, people, vehicles, pax).

    Missing, unparsable and non-positive values fall back to ``default`` so
    that a blank multiplier never zeroes out an otherwise priced entry.
    Fractional input is truncated.
    """
    number = _to_decimal(value)
    if number is None:
        return default
    quantity = int(number)
    if quantity <= 0:
        return default
    return quantity


def quantize_money(amount: Decimal) -> Decimal:
    """Round an amount to cents for display."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal, currency: str = "") -> str:
    """Format an amount as "USD 1,234.50" (or "1,234.50" without currency)."""
    text = f"{quantize_money(amount):,.2f}"
    if currency:
        return f"{currency.upper()} {text}"
    return text
