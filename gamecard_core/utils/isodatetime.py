"""ISO 8601 and Unix timestamp conversion utilities.

This module centralizes all transformations between Python datetime objects,
ISO 8601 strings (how the credential store keeps timestamps) and Unix
seconds (how JWT claims carry them).
"""

from datetime import datetime, UTC


def to_timestamp(dt: datetime) -> str:
    """Convert datetime to ISO 8601 UTC timestamp string."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat().replace("+00:00", "Z")


def now() -> str:
    """Get current UTC timestamp as ISO 8601 string."""
    return to_timestamp(datetime.now(UTC))


def now_unix() -> int:
    """Get current time as integer Unix seconds."""
    return int(datetime.now(UTC).timestamp())
