"""
FastAPI application factory.

* Registers routes for rides, fares, telemetry and admin.
* Opens / closes the shared routing-provider HTTP client via lifespan events.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, fares, rides, telemetry
from src.infrastructure.routing import create_http_client

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the routing HTTP client on startup; close it on shutdown."""
    app.state.http_client = create_http_client()
    yield
    await app.state.http_client.aclose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ride Lifecycle API",
        description=(
            "Validates ride status transitions and role actions, prices "
            "quotes and completed trips, tracks waiting tiers, driver "
            "cancellation compensation and idle safety alerts.  Stateless: "
            "ride state is owned and persisted by the caller."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Routers
    app.include_router(rides.router, prefix="/api/v1")
    app.include_router(fares.router, prefix="/api/v1")
    app.include_router(telemetry.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
