"""
Money utilities
All stored and aggregated monetary values are integer cents. Decimal is
used for intermediate arithmetic; floats only appear at the UI boundary
and are converted once, here.
"""

import re
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Union

Numeric = Union[int, float, str, Decimal]

CURRENCY_SYMBOLS = {
    "AUD": "$",
    "NZD": "$",
    "USD": "$",
    "CAD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


class RoundingMode(str, Enum):
    """Rounding applied when a fractional cent amount is produced"""
    HALF_UP = "half_up"
    HALF_EVEN = "half_even"


_DECIMAL_ROUNDING = {
    RoundingMode.HALF_UP: ROUND_HALF_UP,
    RoundingMode.HALF_EVEN: ROUND_HALF_EVEN,
}


def to_decimal(value: Numeric) -> Decimal:
    """Convert a numeric value to Decimal without binary float noise"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_cents(value: Numeric, mode: RoundingMode = RoundingMode.HALF_UP) -> int:
    """Round a (possibly fractional) cent amount to a whole cent"""
    rounded = to_decimal(value).quantize(Decimal("1"), rounding=_DECIMAL_ROUNDING[mode])
    return int(rounded)


def dollars_to_cents(dollars: Numeric) -> int:
    """Convert dollars to cents for storage"""
    return round_cents(to_decimal(dollars) * 100)


def cents_to_dollars(cents: int) -> Decimal:
    """Convert cents to dollars for display in input fields"""
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def display_to_cents(value: Union[str, int, float, Decimal]) -> int:
    """
    Parse a display string or number to cents
    
    Currency symbols and thousands separators are ignored. Unparseable
    input yields 0.
    """
    if not isinstance(value, str):
        return dollars_to_cents(value)
    
    cleaned = _NON_NUMERIC.sub("", value)
    try:
        return dollars_to_cents(Decimal(cleaned))
    except InvalidOperation:
        return 0


def cents_to_input_value(cents: int) -> str:
    """Format cents as a plain number string (no currency symbol)"""
    return f"{cents_to_dollars(cents):.2f}"


def cents_to_display(cents: int, currency: str = "AUD") -> str:
    """Format cents as a currency display string, e.g. ``-$1,234.50``"""
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    amount = f"{cents_to_dollars(abs(cents)):,.2f}"
    sign = "-" if cents < 0 else ""
    if symbol is None:
        return f"{sign}{currency.upper()} {amount}"
    return f"{sign}{symbol}{amount}"
