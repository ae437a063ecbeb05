"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-06-01", "June 1, 2024", etc.
    - Relative dates: "today", "tomorrow", "next week", "next friday", etc.

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

    # Handle "next" + period, travel dates are almost always in the future
    if date_str.startswith("next "):
        period = date_str[5:]
        if period == "week":
            return today + timedelta(days=(7 - today.weekday()))
        elif period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=1)
        elif period in WEEKDAYS:
            target_day = WEEKDAYS.index(period)
            days_ahead = (target_day - today.weekday()) % 7
            if days_ahead == 0:
                days_ahead = 7
            return today + timedelta(days=days_ahead)

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_optional_date(value: Optional[str | date]) -> Optional[date]:
    """Parse a form date field, returning None when empty or malformed."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value.strip():
        return None
    try:
        return parse_date(value)
    except ValueError:
        return None


def normalize_date_field(value: Optional[str | date]) -> str:
    """Canonical stored form of a date field, ``YYYY-MM-DD``.

    Relative input such as "tomorrow" is resolved against today, so a stored
    date never shifts afterwards. Blank input gives "". Text that cannot be
    parsed is kept as typed; it prices as zero nights or days.
    """
    if value is None:
        return ""
    parsed = parse_optional_date(value)
    if parsed is None:
        return value.strip() if isinstance(value, str) else ""
    return parsed.isoformat()


def _stored_date(value: Optional[str | date]) -> Optional[date]:
    # Stored dates are ISO; relative words are never re-read against today
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def days_between(start: Optional[str | date], end: Optional[str | date]) -> int:
    """Whole days from start to end, never negative.

    Both dates are read as stored ``YYYY-MM-DD`` values. Returns 0 if either
    date is missing or not ISO, or if end does not come after start.
    """
    start_date = _stored_date(start)
    end_date = _stored_date(end)
    if start_date is None or end_date is None:
        return 0
    return max(0, (end_date - start_date).days)
