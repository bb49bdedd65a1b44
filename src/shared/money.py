"""Exact money arithmetic.

Amounts travel as floats through protean fields and JSON, so every
calculation goes through ``Decimal(str(value))`` and is quantized to the
currency's minor unit.
"""

from decimal import ROUND_HALF_UP, Decimal

# ISO 4217 currencies without a minor unit.
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "BIF",
        "CLP",
        "DJF",
        "GNF",
        "JPY",
        "KMF",
        "KRW",
        "MGA",
        "PYG",
        "RWF",
        "UGX",
        "VND",
        "VUV",
        "XAF",
        "XOF",
        "XPF",
    }
)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def currency_exponent(currency: str) -> int:
    return 0 if currency.upper() in ZERO_DECIMAL_CURRENCIES else 2


# Largest amount a processor charge can carry, in minor units.
MAX_MINOR_UNITS = 99_999_999


def minor_unit(currency: str) -> Decimal:
    return Decimal(1).scaleb(-currency_exponent(currency))


def max_amount(currency: str) -> Decimal:
    return Decimal(MAX_MINOR_UNITS).scaleb(-currency_exponent(currency))


def parse_amount(value, currency: str = "usd") -> Decimal:
    """Return ``value`` as an exact amount in ``currency``.

    Raises ``ValueError`` unless the value is a finite, non-negative number of
    whole minor units no larger than ``max_amount(currency)``.
    """
    try:
        amount = to_decimal(value)
    except ArithmeticError as exc:
        raise ValueError(f"{value!r} is not a number") from exc
    if not amount.is_finite():
        raise ValueError("must be a finite number")
    if amount < 0:
        raise ValueError("must be zero or more")
    if amount > max_amount(currency):
        raise ValueError(f"must not exceed {max_amount(currency)}")
    if amount != amount.quantize(minor_unit(currency)):
        raise ValueError(f"must be a whole number of {currency.upper()} minor units")
    return amount


def quantize(amount, currency: str = "usd") -> Decimal:
    return to_decimal(amount).quantize(minor_unit(currency), rounding=ROUND_HALF_UP)


def line_total(unit_price, quantity: int) -> Decimal:
    return to_decimal(unit_price) * quantity


def sum_lines(lines, currency: str = "usd") -> Decimal:
    """Sum ``(unit_price, quantity)`` pairs exactly."""
    total = sum((line_total(price, qty) for price, qty in lines), Decimal("0"))
    return quantize(total, currency)


def to_minor_units(amount, currency: str) -> int:
    """Convert a major-unit amount to the integer the processor expects.

    >>> to_minor_units(20, "usd")
    2000
    >>> to_minor_units(1500, "jpy")
    1500
    """
    return int(quantize(amount, currency).scaleb(currency_exponent(currency)))
