"""ISO-8601 timestamp helpers for persisted and HTTP payloads."""

from __future__ import annotations

from datetime import UTC, datetime


def format_utc_timestamp(value: datetime) -> str:
    """Render a datetime as UTC with millisecond precision and a `Z` suffix."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_utc_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""

    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
