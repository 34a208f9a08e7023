"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AwareDatetime, BaseModel, Field

from src.domain.enums import ActionRole, PaymentSource, RideAction, RideStatus


# ── Shared ────────────────────────────────────────────────────────────


class CoordinatesIn(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class GpsPointIn(CoordinatesIn):
    timestamp_ms: int


class DriverMovementIn(BaseModel):
    distance_km: float = Field(..., ge=0)
    duration_sec: float = Field(..., ge=0)


# ── Requests ──────────────────────────────────────────────────────────


class TransitionRequest(BaseModel):
    # Plain strings: unknown statuses are reported as invalid, not as 422
    from_status: str
    to_status: str


class ActionRequest(BaseModel):
    action: RideAction
    role: ActionRole
    current_status: Optional[RideStatus] = None
    is_assigned_driver: bool = False
    matching_expires_at: Optional[AwareDatetime] = None
    driver_accepted_at: Optional[AwareDatetime] = None
    driver_movement: Optional[DriverMovementIn] = None


class WaitingRequest(BaseModel):
    waiting_started_at: Optional[AwareDatetime] = None
    end_time: Optional[AwareDatetime] = None


class CompensationRequest(BaseModel):
    distance_km: float = Field(..., ge=0)
    duration_sec: float = Field(..., ge=0)
    waiting_started_at: Optional[AwareDatetime] = None
    cancelled_at: Optional[AwareDatetime] = None


class SafetyCheckRequest(BaseModel):
    current_status: RideStatus
    last_movement_at: Optional[AwareDatetime] = None
    idle_alert_sent_at: Optional[AwareDatetime] = None


class GuardRequest(BaseModel):
    user_id: str
    is_tester: bool = False
    wallet_currency: str = Field(..., min_length=3, max_length=3)
    trip_currency: str = Field(..., min_length=3, max_length=3)
    country_code: str = Field(..., min_length=2, max_length=2)
    available_balance: float
    wallet_frozen: bool = False
    user_suspended: bool = False
    resolved_payment_source: PaymentSource


class FareEstimateRequest(BaseModel):
    distance_km: float = Field(..., ge=0)
    duration_minutes: float = Field(..., ge=0)
    waiting_minutes: float = Field(0, ge=0)
    reservation_premium: float = Field(0, ge=0)


class CompleteFareRequest(BaseModel):
    distance_km: float = Field(..., ge=0)
    duration_min: float = Field(..., ge=0)
    country_code: str = Field("NG", min_length=2, max_length=2)
    estimated_duration_min: Optional[float] = Field(None, ge=0)
    waiting_started_at: Optional[AwareDatetime] = None
    trip_ended_at: Optional[AwareDatetime] = None
    fare_multiplier: float = Field(1.0, gt=0)


class DepartureTimeRequest(BaseModel):
    scheduled_pickup_at: AwareDatetime
    eta_minutes: float = Field(..., ge=0)
    early_arrival_buffer: Optional[float] = Field(None, ge=0)


class RouteEstimateRequest(BaseModel):
    origin: CoordinatesIn
    destination: CoordinatesIn
    reservation_premium: float = Field(0, ge=0)
    destination_label: Optional[str] = Field(None, max_length=200)


class TelemetryRequest(BaseModel):
    points: list[GpsPointIn]
    idle_threshold_meters: float = Field(50, gt=0)


class RideSnapshot(BaseModel):
    id: Optional[str] = None
    status: RideStatus = RideStatus.REQUESTED
    matching_expires_at: Optional[AwareDatetime] = None
    driver_accepted_at: Optional[AwareDatetime] = None
    waiting_started_at: Optional[AwareDatetime] = None
    last_movement_at: Optional[AwareDatetime] = None
    idle_alert_sent_at: Optional[AwareDatetime] = None

    model_config = {"from_attributes": True}


class ApplyActionRequest(BaseModel):
    ride: RideSnapshot
    action: RideAction


# ── Responses ─────────────────────────────────────────────────────────


class TransitionResponse(BaseModel):
    valid: bool
    error: Optional[str] = None

    model_config = {"from_attributes": True}


class NextStatesResponse(BaseModel):
    status: str
    next_states: list[RideStatus]


class ActionResponse(BaseModel):
    allowed: bool
    error: Optional[str] = None
    requires_fee: bool = False
    requires_reason: bool = False
    compensation_eligible: bool = False
    within_grace_period: bool = False
    target_status: Optional[RideStatus] = None


class WaitingBreakdownResponse(BaseModel):
    total_minutes: float
    free_minutes: float
    paid_minutes: float
    bonus_minutes: float

    model_config = {"from_attributes": True}


class WaitingResponse(BaseModel):
    breakdown: WaitingBreakdownResponse
    total_waiting_fee: float
    can_cancel_without_penalty: bool
    reason: str


class CompensationResponse(BaseModel):
    eligible: bool
    reason: str
    driver_compensation: float
    platform_fee: float
    rider_charge: float

    model_config = {"from_attributes": True}


class SafetyCheckResponse(BaseModel):
    trigger_alert: bool


class GuardResponse(BaseModel):
    allowed: bool
    code: Optional[str] = None
    message: Optional[str] = None
    details: dict = {}

    model_config = {"from_attributes": True}


class FareBreakdownResponse(BaseModel):
    base: float
    distance: float
    time: float
    waiting: float
    premium: float
    total_fare: float

    model_config = {"from_attributes": True}


class TripFareResponse(BaseModel):
    base_fare: float
    distance_fare: float
    time_fare: float
    waiting_fee: float
    traffic_fee: float
    total_fare: float
    driver_earning: float
    platform_fee: float
    currency_code: str
    formatted_total: str


class DepartureTimeResponse(BaseModel):
    departure_at: datetime


class RouteEstimateResponse(BaseModel):
    distance_km: float
    duration_minutes: int
    fare: FareBreakdownResponse
    navigation: dict[str, str]


class TelemetryResponse(BaseModel):
    distance_km: float
    distance_miles: float
    duration_minutes: float
    average_speed_km_h: float
    idle: bool


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
