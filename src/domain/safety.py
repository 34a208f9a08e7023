"""Idle-vehicle safety alert during an active trip."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .clock import as_utc, resolve_now
from .enums import RideStatus

IDLE_ALERT_MINUTES = 4


def should_trigger_safety_alert(
    last_movement_at: Optional[datetime],
    idle_alert_sent_at: Optional[datetime],
    current_status: RideStatus,
    now: Optional[datetime] = None,
) -> bool:
    """
    True when an in-progress trip has not moved for ``IDLE_ALERT_MINUTES``.

    One alert per idle episode: once an alert is sent after the last
    recorded movement, no further alert fires until the vehicle moves
    again.  The caller records ``idle_alert_sent_at`` when it acts on a
    True result.
    """
    if current_status != RideStatus.IN_PROGRESS:
        return False
    if last_movement_at is None:
        return False
    last_movement_at = as_utc(last_movement_at)
    if idle_alert_sent_at is not None and as_utc(idle_alert_sent_at) > last_movement_at:
        return False

    idle_minutes = (resolve_now(now) - last_movement_at).total_seconds() / 60
    return idle_minutes >= IDLE_ALERT_MINUTES
