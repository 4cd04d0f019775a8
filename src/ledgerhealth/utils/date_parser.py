"""Date parsing utilities."""

from calendar import monthrange
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports "today" plus absolute dates in any format dateutil understands
    ("2024-01-15", "January 15, 2024", "2024-01-15T08:00:00Z", ...).

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    if not date_str:
        raise ValueError("Empty date string")

    if date_str == "today":
        return date.today()

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def to_date(value: Any) -> Optional[date]:
    """Coerce a JSON value (string, date, datetime) into a date, or None if blank."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        if not value.strip():
            return None
        return parse_date(value)
    raise ValueError(f"Could not parse date '{value}'")


def month_bucket(value: date) -> date:
    """Return the first day of the value's calendar month."""
    return value.replace(day=1)


def next_month(value: date) -> date:
    """Return the first day of the month after value."""
    return month_bucket(value) + relativedelta(months=1)


def days_in_month(value: date) -> int:
    """Return the number of days in the value's month."""
    return monthrange(value.year, value.month)[1]


def month_label(value: date) -> str:
    """Return a YYYY-MM label."""
    return value.strftime("%Y-%m")


def get_period_window(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get a half-open [start, end) window for a dashboard period preset.

    The window ends (exclusive) at the first day of the current month, so a
    partially reported current month never drags scores down.

    Args:
        period: One of 3m, 6m, 12m, ytd
        today: Reference date (defaults to today)

    Returns:
        Tuple of (start_date, end_date_exclusive)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()
    end = month_bucket(today)

    if period == "3m":
        return (end - relativedelta(months=3), end)
    elif period == "6m":
        return (end - relativedelta(months=6), end)
    elif period == "12m":
        return (end - relativedelta(months=12), end)
    elif period == "ytd":
        return (today.replace(month=1, day=1), end)
    else:
        raise ValueError(f"Unknown period: '{period}'. Supported periods: 3m, 6m, 12m, ytd")
