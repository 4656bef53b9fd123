from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
DEFAULT_VAT_RATE = Decimal("0.13")


def to_decimal(value) -> Decimal:
    # floats go through str() so 0.1 stays 0.1
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_money(value) -> Decimal:
    """Round a monetary value to 2 decimal places, half away from zero."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def get_vat_rate() -> Decimal:
    return to_decimal(getattr(settings, "BOOKS_VAT_RATE", DEFAULT_VAT_RATE))


def vat_divisor(vat_rate) -> Decimal:
    """Divisor that strips VAT from a VAT-inclusive amount."""
    return Decimal("1") + to_decimal(vat_rate)
