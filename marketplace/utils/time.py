"""UTC clock helpers shared by the offer and discount evaluators."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return the current instant as a UTC-aware datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return value as UTC-aware.

    Backend timestamps without an offset are stored in UTC, so naive values
    are tagged rather than converted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Default an evaluation instant to the wall clock."""
    return utc_now() if now is None else as_utc(now)
