"""
Shared test fixtures.

The API is exercised in-process through ``httpx.ASGITransport``.  The
routing provider is replaced by an ``httpx.MockTransport`` that answers
like OSRM / Nominatim, so tests run without network access.
"""

from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.infrastructure.routing import RoutingClient

# Fixed clock for time-windowed calculations
NOW = datetime(2026, 3, 14, 12, 0, 0, tzinfo=timezone.utc)

OSRM_ROUTE = {
    "code": "Ok",
    "routes": [{"distance": 10_000.0, "duration": 1_200.0}],
}


def _routing_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.startswith("/route/v1/driving/"):
        return httpx.Response(200, json=OSRM_ROUTE)
    if request.url.path == "/search":
        return httpx.Response(200, json=[{"lat": "6.5244", "lon": "3.3792"}])
    return httpx.Response(404)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest_asyncio.fixture
async def routing_client():
    async with httpx.AsyncClient(transport=httpx.MockTransport(_routing_handler)) as http:
        yield RoutingClient(
            http,
            osrm_base_url="https://osrm.test",
            nominatim_base_url="https://nominatim.test",
        )


@pytest_asyncio.fixture
async def client(routing_client: RoutingClient):
    """AsyncClient against the app with the routing provider mocked."""
    from src.api.app import create_app
    from src.api.dependencies import get_routing_client

    app = create_app()
    app.dependency_overrides[get_routing_client] = lambda: routing_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
