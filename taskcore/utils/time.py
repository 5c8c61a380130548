"""Timestamp helpers shared by the domain model and the stores."""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo
from typing import Optional


def ensure_aware(dt: datetime, assume: tzinfo = UTC) -> datetime:
    """
    Attach `assume` to a naive datetime; aware datetimes pass through unchanged.

    Stored timestamps are compared as instants, so every value entering the
    domain must carry an offset.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=assume)
    return dt


def to_utc_z(dt: datetime) -> str:
    """
    Convert an aware datetime to an ISO 8601 UTC string with a Z suffix.

    Example:
        >>> to_utc_z(datetime(2024, 2, 29, 12, 0, tzinfo=UTC))
        '2024-02-29T12:00:00Z'
    """
    if dt.tzinfo is None:
        raise ValueError(
            f"Naive datetime not allowed. Got {dt}. "
            "Use datetime.now(UTC) or dt.replace(tzinfo=UTC)"
        )
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_instant(value: str, assume: tzinfo = UTC) -> datetime:
    """Parse an ISO 8601 string (Z suffix allowed) into an aware datetime."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(text), assume)


def parse_optional_instant(value: Optional[str], assume: tzinfo = UTC) -> Optional[datetime]:
    if value is None or not value.strip():
        return None
    return parse_instant(value, assume)


def utc_now() -> datetime:
    return datetime.now(UTC)


__all__ = ["ensure_aware", "parse_instant", "parse_optional_instant", "to_utc_z", "utc_now"]
