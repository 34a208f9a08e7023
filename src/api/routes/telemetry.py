"""
Telemetry endpoints
===================

POST /api/v1/telemetry/summary -- distance, duration, speed and idle state
                                  for a chronologically ordered GPS trace
"""

from fastapi import APIRouter, Request

from src.api.middleware import limiter
from src.api.schemas import TelemetryRequest, TelemetryResponse
from src.config import settings
from src.domain.distance import (
    calculate_average_speed_km_h,
    calculate_duration_minutes,
    calculate_total_distance_km,
    calculate_total_distance_miles,
    is_idle,
)
from src.domain.entities import GpsPoint

router = APIRouter(prefix="/telemetry", tags=["telemetry"])


@router.post(
    "/summary",
    response_model=TelemetryResponse,
    summary="Summarise a GPS trace",
)
@limiter.limit(settings.rate_limit)
async def summary(request: Request, body: TelemetryRequest):
    points = [GpsPoint(p.lat, p.lng, p.timestamp_ms) for p in body.points]
    return TelemetryResponse(
        distance_km=calculate_total_distance_km(points),
        distance_miles=calculate_total_distance_miles(points),
        duration_minutes=calculate_duration_minutes(points),
        average_speed_km_h=calculate_average_speed_km_h(points),
        idle=is_idle(points, body.idle_threshold_meters),
    )
