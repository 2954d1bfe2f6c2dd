"""
Datetime utility functions.
"""

from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any

Clock = Callable[[], datetime]


def get_utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current UTC datetime
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime to UTC, treating naive values as UTC.

    Args:
        dt: Datetime to normalize

    Returns:
        Timezone-aware UTC datetime
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_datetime(value: Any) -> datetime | None:
    """
    Coerce a stored timestamp into an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings and epoch milliseconds. Anything
    else (including None) yields None.

    Args:
        value: Raw timestamp value read from a document

    Returns:
        UTC datetime or None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    if isinstance(value, str):
        try:
            return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def utc_date_key(dt: datetime | date | None = None) -> str:
    """
    Build the calendar-day key used for per-day counters.

    Args:
        dt: Moment to key (defaults to now)

    Returns:
        Date string in YYYY-MM-DD form, in UTC
    """
    if dt is None:
        dt = get_utc_now()
    if isinstance(dt, datetime):
        dt = ensure_utc(dt).date()
    return dt.isoformat()
