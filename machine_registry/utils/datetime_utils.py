"""Datetime helpers for API responses."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from machine_registry.config import settings

API_TIMEZONE = ZoneInfo(settings.timezone)


def to_api_timezone(dt: datetime) -> datetime:
    """Convert a datetime to the configured API timezone.

    SQLite hands back naive datetimes; those are treated as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(API_TIMEZONE)
