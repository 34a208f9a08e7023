"""
Driver compensation when a rider cancels before pickup.

A driver is owed compensation once they have moved at least 1 km **or**
spent at least 60 s heading to pickup.  The reason string records the
observed value and the threshold it was compared with, so a contested
cancellation can be audited later.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .entities import CancellationCompensation, CompensationDecision
from .enums import DriverCancelReason
from .money import round_money
from .waiting import calculate_waiting_fee

MIN_DISTANCE_KM_FOR_COMPENSATION = 1
MIN_DURATION_SEC_FOR_COMPENSATION = 60

CANCELLATION_DISTANCE_RATE_PER_KM = 1.00
CANCELLATION_MINIMUM_FEE = 3.00
CANCELLATION_PLATFORM_FEE_PERCENT = 20

JUSTIFIED_CANCEL_REASONS: frozenset[DriverCancelReason] = frozenset(
    {
        DriverCancelReason.RIDER_REQUESTED,
        DriverCancelReason.SAFETY_CONCERN,
        DriverCancelReason.VEHICLE_ISSUE,
        DriverCancelReason.EMERGENCY,
        DriverCancelReason.RIDER_NO_SHOW,
    }
)


def _seconds(value: float) -> str:
    # Full precision; integral values print without a trailing ".0"
    return str(int(value)) if float(value).is_integer() else str(value)


def is_driver_eligible_for_compensation(
    distance_km: float, duration_sec: float
) -> CompensationDecision:
    if distance_km >= MIN_DISTANCE_KM_FOR_COMPENSATION:
        return CompensationDecision(
            eligible=True,
            reason=(
                f"Driver moved {distance_km:.2f} km "
                f"(threshold: {MIN_DISTANCE_KM_FOR_COMPENSATION} km)"
            ),
        )

    if duration_sec >= MIN_DURATION_SEC_FOR_COMPENSATION:
        return CompensationDecision(
            eligible=True,
            reason=(
                f"Driver spent {_seconds(duration_sec)} seconds en route "
                f"(threshold: {MIN_DURATION_SEC_FOR_COMPENSATION} seconds)"
            ),
        )

    return CompensationDecision(
        eligible=False,
        reason=(
            "Driver movement below compensation threshold "
            f"({distance_km:.2f} km, {_seconds(duration_sec)} seconds)"
        ),
    )


def calculate_cancellation_compensation(
    distance_km: float,
    duration_sec: float,
    waiting_started_at: Optional[datetime] = None,
    cancelled_at: Optional[datetime] = None,
) -> CancellationCompensation:
    """
    Split a rider cancellation into driver payout and platform fee.

    Ineligible drivers get nothing but the rider still pays the minimum
    fee.  Eligible drivers get the distance payout plus any waiting fee,
    floored at the minimum fee; the platform fee is added on top for the
    rider.
    """
    eligibility = is_driver_eligible_for_compensation(distance_km, duration_sec)

    if not eligibility.eligible:
        return CancellationCompensation(
            eligible=False,
            reason=eligibility.reason,
            driver_compensation=0.0,
            platform_fee=0.0,
            rider_charge=CANCELLATION_MINIMUM_FEE,
        )

    driver_compensation = distance_km * CANCELLATION_DISTANCE_RATE_PER_KM
    if waiting_started_at is not None:
        waiting = calculate_waiting_fee(waiting_started_at, cancelled_at)
        driver_compensation += waiting.total_waiting_fee

    driver_compensation = max(driver_compensation, CANCELLATION_MINIMUM_FEE)
    platform_fee = driver_compensation * CANCELLATION_PLATFORM_FEE_PERCENT / 100

    return CancellationCompensation(
        eligible=True,
        reason=eligibility.reason,
        driver_compensation=round_money(driver_compensation),
        platform_fee=round_money(platform_fee),
        rider_charge=round_money(driver_compensation + platform_fee),
    )


def is_justified_cancellation(reason: DriverCancelReason) -> bool:
    return reason in JUSTIFIED_CANCEL_REASONS
