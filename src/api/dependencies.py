"""FastAPI dependency injection helpers."""

from fastapi import Request

from src.config import settings
from src.domain.pricing import FareOptions, PricingEngine, TripTariff
from src.infrastructure.routing import RoutingClient


def get_fare_options() -> FareOptions:
    return FareOptions(
        base_fare=settings.base_fare,
        per_km_rate=settings.per_km_rate,
        per_minute_rate=settings.per_minute_rate,
        waiting_per_minute_rate=settings.waiting_per_minute_rate,
        minimum_fare=settings.minimum_fare,
    )


def get_pricing_engine() -> PricingEngine:
    return PricingEngine(
        TripTariff(
            base_fare=settings.trip_base_fare,
            rate_per_km=settings.trip_rate_per_km,
            rate_per_minute=settings.trip_rate_per_minute,
            traffic_overrun_rate_per_minute=settings.traffic_overrun_rate_per_minute,
            commission_percent=settings.platform_commission_percent,
        )
    )


def get_routing_client(request: Request) -> RoutingClient:
    """Routing client over the app-wide HTTP connection pool."""
    return RoutingClient(request.app.state.http_client)
