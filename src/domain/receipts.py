"""Rider-facing receipt for a completed trip."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .entities import TripFare


@dataclass(frozen=True)
class ReceiptItem:
    label: str
    amount: float


@dataclass(frozen=True)
class FareReceipt:
    receipt_id: str
    summary: str
    total: float
    currency: str
    items: list[ReceiptItem] = field(default_factory=list)


def generate_fare_receipt(
    ride_id: str,
    fare: TripFare,
    pickup_address: str,
    dropoff_address: str,
    distance_km: float,
    duration_min: float,
    driver_name: str,
    completed_at: datetime,
) -> FareReceipt:
    """Base fare is always listed; other lines only when non-zero."""
    items = [ReceiptItem("Base fare", fare.base_fare)]
    if fare.distance_fare > 0:
        items.append(ReceiptItem(f"Distance ({distance_km:.1f} km)", fare.distance_fare))
    if fare.time_fare > 0:
        items.append(ReceiptItem(f"Time ({duration_min:.0f} min)", fare.time_fare))
    if fare.waiting_fee > 0:
        items.append(ReceiptItem("Waiting time", fare.waiting_fee))
    if fare.traffic_fee > 0:
        items.append(ReceiptItem("Traffic adjustment", fare.traffic_fee))

    return FareReceipt(
        receipt_id=f"RCP-{ride_id[:8].upper()}",
        summary=(
            f"Trip from {pickup_address} to {dropoff_address} with "
            f"{driver_name} on {completed_at:%Y-%m-%d}"
        ),
        total=fare.total_fare,
        currency=fare.currency_code,
        items=items,
    )
