"""
Value objects shared by the lifecycle, pricing and geo modules.

All of them are frozen: each is created fresh from caller-supplied inputs
and discarded after use.  Timestamps the ride service owns (waiting start,
last movement, idle alert) are passed in, never stored here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# ── Geo ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


@dataclass(frozen=True)
class GpsPoint:
    lat: float
    lng: float
    timestamp_ms: int

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.lat, self.lng)


# ── Lifecycle results ─────────────────────────────────────────────────


@dataclass(frozen=True)
class TransitionResult:
    valid: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class ActionValidationResult:
    allowed: bool
    error: Optional[str] = None
    requires_fee: bool = False
    requires_reason: bool = False
    compensation_eligible: bool = False
    within_grace_period: bool = False


@dataclass(frozen=True)
class DriverMovement:
    """Telemetry accumulated since the driver started heading to pickup."""

    distance_km: float
    duration_sec: float


@dataclass(frozen=True)
class CompensationDecision:
    eligible: bool
    reason: str


# ── Waiting ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class WaitingBreakdown:
    total_minutes: float = 0.0
    free_minutes: float = 0.0
    paid_minutes: float = 0.0
    bonus_minutes: float = 0.0


@dataclass(frozen=True)
class WaitingFee:
    free_minutes: float = 0.0
    paid_minutes: float = 0.0
    bonus_minutes: float = 0.0
    total_minutes: float = 0.0
    paid_waiting_fee: float = 0.0
    bonus_waiting_fee: float = 0.0
    total_waiting_fee: float = 0.0


# ── Money ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FareBreakdown:
    base: float
    distance: float
    time: float
    waiting: float
    premium: float
    total_fare: float


@dataclass(frozen=True)
class TripFare:
    base_fare: float
    distance_fare: float
    time_fare: float
    waiting_fee: float
    traffic_fee: float
    total_fare: float
    driver_earning: float
    platform_fee: float
    currency_code: str


@dataclass(frozen=True)
class TrafficAdjustment:
    estimated_minutes: float
    actual_minutes: float
    extra_minutes: float
    traffic_fee: float


@dataclass(frozen=True)
class CancellationCompensation:
    eligible: bool
    reason: str
    driver_compensation: float
    platform_fee: float
    rider_charge: float


@dataclass(frozen=True)
class EarlyStopRecalculation:
    original_estimated_km: float
    actual_distance_km: float
    original_estimated_min: float
    actual_duration_min: float
    original_fare: float
    recalculated_fare: float
    difference: float


@dataclass(frozen=True)
class FareRange:
    min: float
    max: float
    estimate: float
