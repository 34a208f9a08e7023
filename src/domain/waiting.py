"""
Waiting time at pickup
======================

Once the driver is waiting, elapsed time is split into three consecutive,
non-overlapping tiers:

    free   -- first 2 minutes (grace period, not charged)
    paid   -- next 5 minutes  (charged at the paid rate)
    bonus  -- next 4 minutes  (charged at the bonus rate)

Anything past 11 minutes is uncompensated.  Minutes are fractional; an end
time before the start yields all-zero tiers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .clock import as_utc, resolve_now
from .entities import WaitingBreakdown, WaitingFee
from .money import round_money

WAITING_FREE_MINUTES = 2
WAITING_PAID_MINUTES = 5
WAITING_BONUS_MINUTES = 4
TOTAL_WAITING_MINUTES = (
    WAITING_FREE_MINUTES + WAITING_PAID_MINUTES + WAITING_BONUS_MINUTES
)

WAITING_PAID_RATE_PER_MINUTE = 0.30
WAITING_BONUS_RATE_PER_MINUTE = 0.50


def calculate_waiting_time(
    waiting_started_at: Optional[datetime],
    end_time: Optional[datetime] = None,
) -> WaitingBreakdown:
    if waiting_started_at is None:
        return WaitingBreakdown()
    end_time = resolve_now(end_time)

    # Clock skew can put end_time before the start
    elapsed = end_time - as_utc(waiting_started_at)
    total = max(0.0, elapsed.total_seconds() / 60)

    free = min(total, WAITING_FREE_MINUTES)
    after_free = max(0.0, total - WAITING_FREE_MINUTES)
    paid = min(after_free, WAITING_PAID_MINUTES)
    after_paid = max(0.0, after_free - WAITING_PAID_MINUTES)
    bonus = min(after_paid, WAITING_BONUS_MINUTES)

    return WaitingBreakdown(
        total_minutes=total,
        free_minutes=free,
        paid_minutes=paid,
        bonus_minutes=bonus,
    )


def calculate_waiting_fee(
    waiting_started_at: Optional[datetime],
    end_time: Optional[datetime] = None,
) -> WaitingFee:
    """Charge paid and bonus minutes; every figure is rounded to cents."""
    if waiting_started_at is None:
        return WaitingFee()

    breakdown = calculate_waiting_time(waiting_started_at, end_time)
    paid_fee = breakdown.paid_minutes * WAITING_PAID_RATE_PER_MINUTE
    bonus_fee = breakdown.bonus_minutes * WAITING_BONUS_RATE_PER_MINUTE

    return WaitingFee(
        free_minutes=round_money(breakdown.free_minutes),
        paid_minutes=round_money(breakdown.paid_minutes),
        bonus_minutes=round_money(breakdown.bonus_minutes),
        total_minutes=round_money(breakdown.total_minutes),
        paid_waiting_fee=round_money(paid_fee),
        bonus_waiting_fee=round_money(bonus_fee),
        total_waiting_fee=round_money(paid_fee + bonus_fee),
    )


def can_cancel_without_penalty(
    waiting_started_at: Optional[datetime],
    now: Optional[datetime] = None,
) -> tuple[bool, str]:
    """A rider cancels for free until paid waiting has begun."""
    if waiting_started_at is None:
        return True, "No waiting period has started"

    breakdown = calculate_waiting_time(waiting_started_at, now)
    if breakdown.paid_minutes > 0:
        return False, (
            f"Paid waiting has begun ({breakdown.paid_minutes:.1f} minutes). "
            "Cancellation fee applies."
        )
    return True, (
        f"Within free waiting period "
        f"({breakdown.free_minutes:.1f}/{WAITING_FREE_MINUTES} minutes)"
    )
