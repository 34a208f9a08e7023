"""
Fare endpoints
==============

POST /api/v1/fares/estimate        -- quote from known distance / duration
POST /api/v1/fares/route-estimate  -- quote from coordinates via the routing provider
POST /api/v1/fares/complete        -- final fare for a finished trip
POST /api/v1/fares/departure-time  -- when a reserved ride's driver should leave
"""

from dataclasses import asdict, replace

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.dependencies import get_fare_options, get_pricing_engine, get_routing_client
from src.api.middleware import limiter
from src.api.schemas import (
    CompleteFareRequest,
    DepartureTimeRequest,
    DepartureTimeResponse,
    FareBreakdownResponse,
    FareEstimateRequest,
    RouteEstimateRequest,
    RouteEstimateResponse,
    TripFareResponse,
)
from src.config import settings
from src.domain.entities import Coordinates
from src.domain.money import format_currency, get_currency_from_country
from src.domain.pricing import (
    FareOptions,
    PricingEngine,
    calculate_recommended_departure_time,
    estimate_fare,
)
from src.infrastructure.routing import RoutingClient, generate_navigation_links

router = APIRouter(prefix="/fares", tags=["fares"])


@router.post("/estimate", response_model=FareBreakdownResponse, summary="Estimate a fare")
@limiter.limit(settings.rate_limit)
async def estimate(
    request: Request,
    body: FareEstimateRequest,
    options: FareOptions = Depends(get_fare_options),
):
    options = replace(options, reservation_premium=body.reservation_premium)
    return FareBreakdownResponse.model_validate(
        estimate_fare(body.distance_km, body.duration_minutes, body.waiting_minutes, options)
    )


@router.post(
    "/route-estimate",
    response_model=RouteEstimateResponse,
    summary="Estimate a fare between two points",
    responses={502: {"description": "Routing provider could not return a route."}},
)
@limiter.limit(settings.rate_limit)
async def route_estimate(
    request: Request,
    body: RouteEstimateRequest,
    routing: RoutingClient = Depends(get_routing_client),
    options: FareOptions = Depends(get_fare_options),
):
    origin = Coordinates(body.origin.lat, body.origin.lng)
    destination = Coordinates(body.destination.lat, body.destination.lng)

    route = await routing.calculate_route(origin, destination)
    if not route.success:
        raise HTTPException(status_code=502, detail=route.error)

    options = replace(options, reservation_premium=body.reservation_premium)
    fare = estimate_fare(route.distance_km, route.duration_minutes, 0, options)
    return RouteEstimateResponse(
        distance_km=route.distance_km,
        duration_minutes=route.duration_minutes,
        fare=FareBreakdownResponse.model_validate(fare),
        navigation=generate_navigation_links(destination, body.destination_label),
    )


@router.post("/complete", response_model=TripFareResponse, summary="Final trip fare")
@limiter.limit(settings.rate_limit)
async def complete(
    request: Request,
    body: CompleteFareRequest,
    engine: PricingEngine = Depends(get_pricing_engine),
):
    currency = get_currency_from_country(body.country_code)
    fare = engine.calculate_complete_fare(
        body.distance_km,
        body.duration_min,
        currency,
        estimated_duration_min=body.estimated_duration_min,
        waiting_started_at=body.waiting_started_at,
        trip_ended_at=body.trip_ended_at,
        fare_multiplier=body.fare_multiplier,
    )
    return TripFareResponse(
        **asdict(fare), formatted_total=format_currency(fare.total_fare, currency)
    )


@router.post(
    "/departure-time",
    response_model=DepartureTimeResponse,
    summary="Recommended departure time for a reservation",
)
@limiter.limit(settings.rate_limit)
async def departure_time(request: Request, body: DepartureTimeRequest):
    buffer = (
        body.early_arrival_buffer
        if body.early_arrival_buffer is not None
        else settings.early_arrival_buffer_minutes
    )
    return DepartureTimeResponse(
        departure_at=calculate_recommended_departure_time(
            body.scheduled_pickup_at, body.eta_minutes, buffer
        )
    )
