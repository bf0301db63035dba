"""Utility functions for bankledger."""

from bankledger.utils.date_parser import parse_date, day_bounds, get_date_range
from bankledger.utils.amount_parser import (
    parse_amount,
    to_minor_units,
    format_minor_units,
    format_currency,
)

__all__ = [
    "parse_date",
    "day_bounds",
    "get_date_range",
    "parse_amount",
    "to_minor_units",
    "format_minor_units",
    "format_currency",
]
