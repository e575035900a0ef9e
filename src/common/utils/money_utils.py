"""Conversions between exact money values and their stored/displayed forms."""

from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction

from src.common.config.settings import settings

CENT = Decimal("0.01")


def to_fraction(value: Decimal | int | str | Fraction) -> Fraction:
    """Exact rational value of a price. Floats are rejected to avoid binary rounding."""
    if isinstance(value, float):
        raise TypeError("Money values must not be floats; use Decimal or str")
    if isinstance(value, str):
        value = Decimal(value)
    return Fraction(value)


def quantize(value: Fraction, places: Decimal = CENT) -> Decimal:
    """Rounds an exact value half-up to the given number of decimal places."""
    return (Decimal(value.numerator) / Decimal(value.denominator)).quantize(places, rounding=ROUND_HALF_UP)


def to_cents(value: Fraction) -> Decimal:
    return quantize(value, CENT)


def format_money(value: Fraction | Decimal) -> str:
    if isinstance(value, Fraction):
        value = to_cents(value)
    return f"{settings.CURRENCY} {value:,.2f}"
