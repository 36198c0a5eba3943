"""Helpers shared by response schemas."""

from datetime import UTC, datetime


def as_utc(value: datetime | None) -> datetime | None:
    """MongoDB hands back naive UTC datetimes unless the client is tz_aware; normalize both."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
