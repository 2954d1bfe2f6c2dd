"""
Common utility functions.
"""

from shared.utils.datetime_utils import (
    Clock,
    ensure_utc,
    get_utc_now,
    to_datetime,
    utc_date_key,
)

__all__ = [
    "Clock",
    "get_utc_now",
    "ensure_utc",
    "to_datetime",
    "utc_date_key",
]
