"""Serialization utilities for record fields."""
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def serialize_datetime(value: Optional[datetime]) -> Optional[str]:
    """
    Serialize datetime to ISO format string.

    Naive datetimes are assumed to be UTC. Output is fixed-width so stored
    timestamps sort lexicographically.

    Args:
        value: Datetime value or None

    Returns:
        ISO format string or None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge ``updates`` into a copy of ``base``.

    Nested dicts are merged key by key; every other value is replaced.

    Args:
        base: Existing fields
        updates: Fields being written

    Returns:
        A new merged dictionary
    """
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
