"""Timestamp helpers shared by the card model, schema and sync driver."""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC. Naive values are assumed to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_timestamp(raw: str | datetime) -> datetime:
    """Parse an ISO 8601 timestamp (``Z`` suffix accepted) into aware UTC.

    Raises:
        ValueError: If the string is not a valid ISO 8601 timestamp
    """
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    return ensure_utc(datetime.fromisoformat(raw))


def format_timestamp(value: datetime) -> str:
    """Format a datetime the way the board API does: millisecond precision, ``Z`` suffix."""
    utc = ensure_utc(value)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
