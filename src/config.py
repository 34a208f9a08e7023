"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Quote-time fare estimate (distance/duration from the routing provider)
    base_fare: float = 2.50
    per_km_rate: float = 1.20
    per_minute_rate: float = 0.25
    waiting_per_minute_rate: float = 0.35
    minimum_fare: float = 5.00

    # Completed-trip tariff
    trip_base_fare: float = 5.00
    trip_rate_per_km: float = 1.50
    trip_rate_per_minute: float = 0.25
    traffic_overrun_rate_per_minute: float = 0.35
    platform_commission_percent: float = 20.0

    # Reservations
    early_arrival_buffer_minutes: int = 10

    # Routing provider
    osrm_base_url: str = "https://router.project-osrm.org"
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    routing_timeout_seconds: float = 10.0
    routing_user_agent: str = "RideLifecycle/1.0"
    eta_traffic_buffer: float = 1.15

    # Money movement must never run with the financial engine unlocked
    financial_engine_locked: bool = True

    # API
    rate_limit: str = "100/minute"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
