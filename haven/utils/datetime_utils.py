"""
Timezone-aware datetime utilities.

Datetimes are stored as naive UTC (SQLite has no timezone support) and are
always handed to the rest of the application as timezone-aware UTC values.
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Args:
        dt: datetime to convert (can be None, naive, or timezone-aware)

    Returns:
        Optional[datetime]: UTC timezone-aware datetime, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def to_naive_utc(dt: datetime) -> datetime:
    """Convert a datetime to naive UTC for storage."""
    if dt.tzinfo is not None:
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def local_date(dt: datetime, tz_name: str) -> date:
    """
    Calendar date of a datetime in the given IANA timezone.

    Example:
        >>> local_date(datetime(2024, 1, 19, 23, 0, tzinfo=UTC), "Asia/Tokyo")
        date(2024, 1, 20)
    """
    return ensure_utc(dt).astimezone(ZoneInfo(tz_name)).date()


def millis_between(start: datetime, end: datetime) -> int:
    """Whole milliseconds from start to end."""
    delta = ensure_utc(end) - ensure_utc(start)
    return int(delta.total_seconds() * 1000)
