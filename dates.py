"""
Date handling for stored timestamps.

Articles and accounts carry `created_at` in whatever shape the store handed
back: a datetime, an ISO string, an epoch number (milliseconds, like the
browser clients write), or a store timestamp object such as
`bson.timestamp.Timestamp` (`as_datetime()`) or a Firestore-style
`to_date()` accessor. Formatting never raises; unusable values render as "".
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

logger = logging.getLogger("minispace.dates")

_ACCESSORS = ("as_datetime", "to_datetime", "to_date", "toDate")


def to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    for accessor in _ACCESSORS:
        method = getattr(value, accessor, None)
        if callable(method):
            try:
                converted = method()
            except Exception:
                logger.debug("timestamp accessor %s failed on %r", accessor, value, exc_info=True)
                return None
            return converted if isinstance(converted, datetime) else to_datetime(converted)
    return None


def format_date(value: Any) -> str:
    """MM/DD/YYYY, or "" when the value is not a usable date."""
    dt = to_datetime(value)
    return dt.strftime("%m/%d/%Y") if dt else ""


def format_month_year(value: Any) -> str:
    """"March 2024" style, used for join dates."""
    dt = to_datetime(value)
    return dt.strftime("%B %Y") if dt else ""


def sort_key(value: Any) -> float:
    """Newest-first sorting helper; undated values sort as the epoch."""
    dt = to_datetime(value)
    if dt is None:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()
