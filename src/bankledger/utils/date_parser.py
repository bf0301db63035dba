"""Date parsing utilities for transaction history filters."""

import re
from datetime import date, datetime, time, timedelta, UTC
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_AGO_PATTERN = re.compile(r"^(\d+)\s+(day|week|month|year)s?\s+ago$")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "Jan 15 2024") and relative ones:
    "today", "yesterday", "this week", "this month", "last month",
    "this year", "last year" and "<n> days|weeks|months|years ago".

    Args:
        date_str: Date string
        today: Reference day for relative expressions (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    if text == "this week":
        return today - timedelta(days=today.weekday())
    if text == "this month":
        return today.replace(day=1)
    if text == "last month":
        return (today - relativedelta(months=1)).replace(day=1)
    if text == "this year":
        return today.replace(month=1, day=1)
    if text == "last year":
        return today.replace(month=1, day=1) - relativedelta(years=1)

    match = _AGO_PATTERN.match(text)
    if match:
        count = int(match.group(1))
        unit = match.group(2)
        return today - relativedelta(**{f"{unit}s": count})

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def day_bounds(
    start: Optional[date], end: Optional[date]
) -> tuple[Optional[datetime], Optional[datetime]]:
    """Turn an inclusive day range into a half-open UTC timestamp range.

    The end bound is midnight after ``end`` so the whole last day is included.
    """
    if start is not None and end is not None and start > end:
        raise ValueError(f"Start date {start} is after end date {end}")

    start_at = datetime.combine(start, time.min, tzinfo=UTC) if start is not None else None
    end_before = (
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=UTC) if end is not None else None
    )
    return start_at, end_before


PERIODS = ("this-week", "this-month", "this-year", "last-week", "last-month", "last-year")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get inclusive start and end dates for a named period.

    Args:
        period: One of this-week, this-month, this-year, last-week, last-month, last-year
        today: Reference day (defaults to today)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-week":
        return today - timedelta(days=today.weekday()), today
    if period == "this-month":
        return today.replace(day=1), today
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "last-week":
        start = today - timedelta(days=today.weekday() + 7)
        return start, start + timedelta(days=6)
    if period == "last-month":
        first_of_month = today.replace(day=1)
        return first_of_month - relativedelta(months=1), first_of_month - timedelta(days=1)
    if period == "last-year":
        first_of_year = today.replace(month=1, day=1)
        return first_of_year - relativedelta(years=1), first_of_year - timedelta(days=1)

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
