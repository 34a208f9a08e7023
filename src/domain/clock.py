"""
UTC helpers for the time-windowed calculations.

Callers may hand in timestamps straight from a tz-less column; naive
values are read as UTC so they compare with the aware wall clock.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values pass through unchanged."""
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def resolve_now(now: Optional[datetime] = None) -> datetime:
    return utcnow() if now is None else as_utc(now)
