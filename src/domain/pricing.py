"""
Fare Engine
===========

Quote-time estimate
-------------------
    subtotal = base + distance_km x per_km + minutes x per_minute
             + waiting_minutes x waiting_per_minute + reservation_premium
    total    = max(subtotal, minimum_fare)

Distance, time and waiting charges are each rounded to cents before they
are reported.  The floor is compared against the *unrounded* subtotal and
the total is rounded once, so rounding error never leaks into the floor
comparison.

Completed-trip fare
-------------------
    total = (base + distance_km x per_km + minutes x per_minute) x multiplier
          + waiting fee + traffic overrun fee

``multiplier`` (ride class / surge) is clamped to at least 1.0.  The
platform takes ``commission_percent`` of the total; the driver earns the
rest.

Complexity: O(1) per calculation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .entities import (
    EarlyStopRecalculation,
    FareBreakdown,
    FareRange,
    TrafficAdjustment,
    TripFare,
)
from .money import round_money
from .waiting import calculate_waiting_fee

DEFAULT_EARLY_ARRIVAL_BUFFER_MINUTES = 10

# Share of the estimated duration allowed for traffic in the quoted range
TRAFFIC_VARIANCE = 0.3


@dataclass(frozen=True)
class FareOptions:
    base_fare: float = 2.50
    per_km_rate: float = 1.20
    per_minute_rate: float = 0.25
    waiting_per_minute_rate: float = 0.35
    minimum_fare: float = 5.00
    reservation_premium: float = 0.0


@dataclass(frozen=True)
class TripTariff:
    base_fare: float = 5.00
    rate_per_km: float = 1.50
    rate_per_minute: float = 0.25
    traffic_overrun_rate_per_minute: float = 0.35
    commission_percent: float = 20.0


def estimate_fare(
    distance_km: float,
    duration_minutes: float,
    waiting_minutes: float = 0,
    options: Optional[FareOptions] = None,
) -> FareBreakdown:
    opts = options or FareOptions()

    distance_charge = distance_km * opts.per_km_rate
    time_charge = duration_minutes * opts.per_minute_rate
    waiting_charge = waiting_minutes * opts.waiting_per_minute_rate
    subtotal = (
        opts.base_fare
        + distance_charge
        + time_charge
        + waiting_charge
        + opts.reservation_premium
    )

    return FareBreakdown(
        base=opts.base_fare,
        distance=round_money(distance_charge),
        time=round_money(time_charge),
        waiting=round_money(waiting_charge),
        premium=opts.reservation_premium,
        total_fare=round_money(max(subtotal, opts.minimum_fare)),
    )


def calculate_recommended_departure_time(
    scheduled_pickup_at: datetime,
    eta_minutes: float,
    early_arrival_buffer: float = DEFAULT_EARLY_ARRIVAL_BUFFER_MINUTES,
) -> datetime:
    """When a reserved ride's driver should leave to arrive a little early."""
    return scheduled_pickup_at - timedelta(minutes=eta_minutes + early_arrival_buffer)


def calculate_traffic_adjustment(
    estimated_minutes: float,
    actual_minutes: float,
    overrun_rate_per_minute: float = TripTariff.traffic_overrun_rate_per_minute,
) -> TrafficAdjustment:
    extra = max(0.0, actual_minutes - estimated_minutes)
    return TrafficAdjustment(
        estimated_minutes=round_money(estimated_minutes),
        actual_minutes=round_money(actual_minutes),
        extra_minutes=round_money(extra),
        traffic_fee=round_money(extra * overrun_rate_per_minute),
    )


class PricingEngine:
    """High-level API used by the fare endpoints."""

    def __init__(self, tariff: Optional[TripTariff] = None):
        self.tariff = tariff or TripTariff()

    def calculate_estimated_fare(
        self,
        estimated_distance_km: float,
        estimated_duration_min: float,
        fare_multiplier: float = 1.0,
    ) -> float:
        multiplier = max(1.0, fare_multiplier)
        raw = (
            self.tariff.base_fare
            + estimated_distance_km * self.tariff.rate_per_km
            + estimated_duration_min * self.tariff.rate_per_minute
        ) * multiplier
        return round_money(raw)

    def calculate_fare_estimate_range(
        self,
        estimated_distance_km: float,
        estimated_duration_min: float,
        fare_multiplier: float = 1.0,
    ) -> FareRange:
        estimate = self.calculate_estimated_fare(
            estimated_distance_km, estimated_duration_min, fare_multiplier
        )
        traffic_allowance = (
            estimated_duration_min
            * TRAFFIC_VARIANCE
            * self.tariff.traffic_overrun_rate_per_minute
            * max(1.0, fare_multiplier)
        )
        return FareRange(
            min=estimate,
            max=round_money(estimate + traffic_allowance),
            estimate=estimate,
        )

    def calculate_complete_fare(
        self,
        distance_km: float,
        duration_min: float,
        currency_code: str,
        *,
        estimated_duration_min: Optional[float] = None,
        waiting_started_at: Optional[datetime] = None,
        trip_ended_at: Optional[datetime] = None,
        fare_multiplier: float = 1.0,
    ) -> TripFare:
        multiplier = max(1.0, fare_multiplier)
        if estimated_duration_min is None:
            estimated_duration_min = duration_min

        base = self.tariff.base_fare * multiplier
        distance = distance_km * self.tariff.rate_per_km * multiplier
        time = duration_min * self.tariff.rate_per_minute * multiplier

        waiting_fee = calculate_waiting_fee(
            waiting_started_at, trip_ended_at
        ).total_waiting_fee
        traffic_fee = calculate_traffic_adjustment(
            estimated_duration_min,
            duration_min,
            self.tariff.traffic_overrun_rate_per_minute,
        ).traffic_fee

        total = base + distance + time + waiting_fee + traffic_fee
        platform_fee = total * self.tariff.commission_percent / 100

        return TripFare(
            base_fare=round_money(base),
            distance_fare=round_money(distance),
            time_fare=round_money(time),
            waiting_fee=round_money(waiting_fee),
            traffic_fee=round_money(traffic_fee),
            total_fare=round_money(total),
            driver_earning=round_money(total - platform_fee),
            platform_fee=round_money(platform_fee),
            currency_code=currency_code,
        )

    def recalculate_fare_for_early_stop(
        self,
        original_estimated_km: float,
        actual_distance_km: float,
        original_estimated_min: float,
        actual_duration_min: float,
        currency_code: str,
        *,
        waiting_started_at: Optional[datetime] = None,
        trip_ended_at: Optional[datetime] = None,
    ) -> EarlyStopRecalculation:
        """Re-price a trip the rider ended before the original destination."""
        original = self.calculate_estimated_fare(
            original_estimated_km, original_estimated_min
        )
        actual = self.calculate_complete_fare(
            actual_distance_km,
            actual_duration_min,
            currency_code,
            estimated_duration_min=original_estimated_min,
            waiting_started_at=waiting_started_at,
            trip_ended_at=trip_ended_at,
        )
        return EarlyStopRecalculation(
            original_estimated_km=round_money(original_estimated_km),
            actual_distance_km=round_money(actual_distance_km),
            original_estimated_min=round_money(original_estimated_min),
            actual_duration_min=round_money(actual_duration_min),
            original_fare=original,
            recalculated_fare=actual.total_fare,
            difference=round_money(original - actual.total_fare),
        )
