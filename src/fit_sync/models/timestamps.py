"""Timestamp encoding shared by persisted and remote records."""

from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Encode a datetime as ISO-8601, assuming UTC for naive values."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def parse_timestamp(value: Any) -> datetime:
    """Parse timestamp from various formats.

    Accepts datetimes, ISO-8601 strings (including a trailing ``Z``) and
    Unix timestamps in seconds or milliseconds. Naive results are treated
    as UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        raise ValueError(f"Cannot parse timestamp: {value}")
    elif isinstance(value, (int, float)):
        # Unix timestamp (seconds or milliseconds)
        if value > 1e12:
            value = value / 1000
        parsed = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Cannot parse timestamp: {value}") from None
    else:
        raise ValueError(f"Cannot parse timestamp: {value}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
