"""Date and month-key parsing utilities."""

import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from pocketbook.domain.errors import ValidationError, invalid_month

MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def month_key(value: Union[date, datetime, str, None]) -> Optional[str]:
    """Return the "YYYY-MM" bucket of a date-like value.

    Dates and datetimes are formatted directly; strings are matched on their
    first seven characters so both "2024-01" and "2024-01-15" map to
    "2024-01". Returns None when the value has no recognizable month.
    """
    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}"
    if isinstance(value, str):
        prefix = value.strip()[:7]
        if MONTH_KEY_PATTERN.match(prefix):
            return prefix
    return None


def parse_month(month_str: str) -> str:
    """Normalize user input into a month key.

    Accepts "YYYY-MM" directly and otherwise falls back to ``parse_date``, so
    "last month" or "2024-03-15" also work.

    Raises:
        ValidationError: If no month can be derived
    """
    text = (month_str or "").strip()
    if MONTH_KEY_PATTERN.match(text):
        return text
    try:
        return month_key(parse_date(text))
    except ValueError:
        raise ValidationError(invalid_month(month_str))


def month_start(month: str) -> date:
    """Return the first day of a month key."""
    if not MONTH_KEY_PATTERN.match(month or ""):
        raise ValidationError(invalid_month(month))
    year, mon = month.split("-")
    return date(int(year), int(mon), 1)


def shift_month(month: str, delta: int) -> str:
    """Move a month key by ``delta`` months, rolling over year boundaries."""
    return month_key(month_start(month) + relativedelta(months=delta))
