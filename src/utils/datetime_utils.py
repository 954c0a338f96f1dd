"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from src.utils.datetime_utils import utc_now, to_iso_timestamp

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)

    # Bundle exportDate, e.g. "2025-03-01T18:04:05.123Z"
    export_date = to_iso_timestamp(utc_now())
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def to_iso_timestamp(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision and a Z suffix.

    Naive datetimes are assumed to already be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_iso_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing Z.

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
