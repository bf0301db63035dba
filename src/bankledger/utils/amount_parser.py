"""Amount parsing and minor-unit conversion utilities."""

from decimal import Decimal, InvalidOperation
import re

CENTS_PER_UNIT = 100
_SCALE = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "1,234.56"
    - "-123.45"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = re.sub(r"[$€£¥,\s]", "", amount_str.strip())

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite():
        raise ValueError(f"Amount '{amount_str}' is not a finite number")
    return amount


def to_minor_units(value: Decimal | int | str) -> int:
    """Convert a decimal-safe amount into integer cents.

    Binary floats are refused: they cannot represent most cent values exactly.

    Raises:
        ValueError: If the value is a float, not a number, or has sub-cent precision
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError("Amount must be a decimal string or integer, not a float")

    if isinstance(value, int):
        return value * CENTS_PER_UNIT

    if isinstance(value, str):
        value = parse_amount(value)

    if not isinstance(value, Decimal):
        raise ValueError(f"Unsupported amount type: {type(value).__name__}")
    if not value.is_finite():
        raise ValueError("Amount must be a finite number")

    try:
        quantized = value.quantize(_SCALE)
    except InvalidOperation:
        raise ValueError(f"Amount {value} is too large")
    if value != quantized:
        raise ValueError("Amount cannot have more than 2 decimal places")

    return int(quantized * CENTS_PER_UNIT)


def minor_units_to_decimal(cents: int) -> Decimal:
    """Convert integer cents back to a two-place Decimal."""
    return (Decimal(cents) / CENTS_PER_UNIT).quantize(_SCALE)


def format_minor_units(cents: int) -> str:
    """Render integer cents as a plain decimal string such as ``-12.50``."""
    return str(minor_units_to_decimal(cents))


def format_currency(cents: int) -> str:
    """Render integer cents for display, e.g. ``$1,234.50`` or ``-$3.00``."""
    amount = minor_units_to_decimal(cents)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
