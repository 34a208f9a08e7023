"""
Integration tests for the REST API endpoints.

The app runs in-process over ``ASGITransport``; the routing provider is
swapped for a mocked client through ``dependency_overrides`` (see
``conftest.py``).
"""

from datetime import datetime, timedelta, timezone

import httpx
import pytest
from httpx import AsyncClient

from src.api.dependencies import get_routing_client
from src.infrastructure.routing import RoutingClient


def _iso(dt: datetime) -> str:
    return dt.isoformat()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ── Lifecycle ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_validate_transition_ok(client: AsyncClient):
    resp = await client.post(
        "/api/v1/rides/transitions/validate",
        json={"from_status": "arrived", "to_status": "waiting"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"valid": True, "error": None}


@pytest.mark.asyncio
async def test_validate_transition_from_terminal(client: AsyncClient):
    resp = await client.post(
        "/api/v1/rides/transitions/validate",
        json={"from_status": "completed", "to_status": "in_progress"},
    )
    data = resp.json()
    assert data["valid"] is False
    assert data["error"] == "Cannot transition from terminal state 'completed'"


@pytest.mark.asyncio
async def test_validate_transition_unknown_status(client: AsyncClient):
    resp = await client.post(
        "/api/v1/rides/transitions/validate",
        json={"from_status": "paused", "to_status": "matching"},
    )
    assert resp.status_code == 200
    assert resp.json()["valid"] is False


@pytest.mark.asyncio
async def test_next_states(client: AsyncClient):
    resp = await client.get("/api/v1/rides/statuses/waiting/next")
    assert resp.json()["next_states"] == ["in_progress", "cancelled"]

    resp = await client.get("/api/v1/rides/statuses/cancelled/next")
    assert resp.json()["next_states"] == []


@pytest.mark.asyncio
async def test_apply_action_moves_ride(client: AsyncClient):
    resp = await client.post(
        "/api/v1/rides/transitions",
        json={"ride": {"id": "r-1", "status": "arrived"}, "action": "start_waiting"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "waiting"
    assert data["waiting_started_at"] is not None


@pytest.mark.asyncio
async def test_apply_action_invalid_is_409(client: AsyncClient):
    resp = await client.post(
        "/api/v1/rides/transitions",
        json={"ride": {"id": "r-1", "status": "cancelled"}, "action": "start_trip"},
    )
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Cannot transition from terminal state 'cancelled'"


@pytest.mark.asyncio
async def test_validate_action_returns_target(client: AsyncClient):
    resp = await client.post(
        "/api/v1/rides/actions/validate",
        json={
            "action": "start_trip",
            "role": "driver",
            "current_status": "waiting",
            "is_assigned_driver": True,
        },
    )
    data = resp.json()
    assert data["allowed"] is True
    assert data["target_status"] == "in_progress"


@pytest.mark.asyncio
async def test_validate_action_rider_cancel_with_fee(client: AsyncClient):
    resp = await client.post(
        "/api/v1/rides/actions/validate",
        json={
            "action": "cancel_ride",
            "role": "rider",
            "current_status": "accepted",
            "driver_accepted_at": _iso(_utcnow() - timedelta(minutes=10)),
            "driver_movement": {"distance_km": 2.0, "duration_sec": 300},
        },
    )
    data = resp.json()
    assert data["allowed"] is True
    assert data["requires_fee"] is True
    assert data["target_status"] == "cancelled"


@pytest.mark.asyncio
async def test_naive_timestamps_rejected(client: AsyncClient):
    resp = await client.post(
        "/api/v1/rides/waiting",
        json={"waiting_started_at": "2026-03-14T12:00:00"},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_waiting(client: AsyncClient):
    start = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)
    resp = await client.post(
        "/api/v1/rides/waiting",
        json={
            "waiting_started_at": _iso(start),
            "end_time": _iso(start + timedelta(minutes=10)),
        },
    )
    data = resp.json()
    assert data["breakdown"] == {
        "total_minutes": 10.0,
        "free_minutes": 2.0,
        "paid_minutes": 5.0,
        "bonus_minutes": 3.0,
    }
    assert data["total_waiting_fee"] == pytest.approx(3.0)
    assert data["can_cancel_without_penalty"] is False


@pytest.mark.asyncio
async def test_waiting_reads_clock_once(client: AsyncClient, monkeypatch):
    start = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)
    # Each read jumps further past the end of the free tier
    readings = iter(start + timedelta(seconds=119 + 60 * i) for i in range(10))
    monkeypatch.setattr("src.domain.clock.utcnow", lambda: next(readings))

    resp = await client.post(
        "/api/v1/rides/waiting", json={"waiting_started_at": _iso(start)}
    )
    data = resp.json()
    assert data["breakdown"]["paid_minutes"] == 0
    assert data["total_waiting_fee"] == 0
    assert data["can_cancel_without_penalty"] is True


@pytest.mark.asyncio
async def test_compensation(client: AsyncClient):
    resp = await client.post(
        "/api/v1/rides/compensation",
        json={"distance_km": 0.5, "duration_sec": 59},
    )
    data = resp.json()
    assert data["eligible"] is False
    assert data["rider_charge"] == 3.0


@pytest.mark.asyncio
async def test_safety_check(client: AsyncClient):
    last_moved = _iso(_utcnow() - timedelta(minutes=5))
    resp = await client.post(
        "/api/v1/rides/safety-check",
        json={"current_status": "in_progress", "last_movement_at": last_moved},
    )
    assert resp.json() == {"trigger_alert": True}

    resp = await client.post(
        "/api/v1/rides/safety-check",
        json={"current_status": "waiting", "last_movement_at": last_moved},
    )
    assert resp.json() == {"trigger_alert": False}


@pytest.mark.asyncio
async def test_guard_rejects_mismatched_currency(client: AsyncClient):
    resp = await client.post(
        "/api/v1/rides/guard",
        json={
            "user_id": "u-1",
            "wallet_currency": "USD",
            "trip_currency": "ZAR",
            "country_code": "ZA",
            "available_balance": 100,
            "resolved_payment_source": "MAIN_WALLET",
        },
    )
    data = resp.json()
    assert data["allowed"] is False
    assert data["code"] == "CURRENCY_MISMATCH"


# ── Fares ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_fare_estimate_floor(client: AsyncClient):
    resp = await client.post(
        "/api/v1/fares/estimate", json={"distance_km": 0, "duration_minutes": 0}
    )
    assert resp.status_code == 200
    assert resp.json()["total_fare"] == 5.0


@pytest.mark.asyncio
async def test_fare_estimate(client: AsyncClient):
    resp = await client.post(
        "/api/v1/fares/estimate", json={"distance_km": 10, "duration_minutes": 20}
    )
    data = resp.json()
    assert data["distance"] == 12.0
    assert data["time"] == 5.0
    assert data["total_fare"] == 19.5


@pytest.mark.asyncio
async def test_fare_estimate_rejects_negative_distance(client: AsyncClient):
    resp = await client.post(
        "/api/v1/fares/estimate", json={"distance_km": -1, "duration_minutes": 0}
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_route_estimate(client: AsyncClient):
    resp = await client.post(
        "/api/v1/fares/route-estimate",
        json={
            "origin": {"lat": 6.5244, "lng": 3.3792},
            "destination": {"lat": 6.6018, "lng": 3.3515},
        },
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["distance_km"] == 10.0
    assert data["duration_minutes"] == 20
    assert data["fare"]["total_fare"] == 19.5
    assert "google_maps" in data["navigation"]


@pytest.mark.asyncio
async def test_route_estimate_provider_down_is_502(client: AsyncClient):
    from src.api.app import create_app

    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(503)))
    app = create_app()
    app.dependency_overrides[get_routing_client] = lambda: RoutingClient(
        http, "https://osrm.test", "https://nominatim.test"
    )
    async with AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as ac:
        resp = await ac.post(
            "/api/v1/fares/route-estimate",
            json={
                "origin": {"lat": 6.5244, "lng": 3.3792},
                "destination": {"lat": 6.6018, "lng": 3.3515},
            },
        )
    await http.aclose()
    assert resp.status_code == 502


@pytest.mark.asyncio
async def test_complete_fare(client: AsyncClient):
    resp = await client.post(
        "/api/v1/fares/complete",
        json={"distance_km": 10, "duration_min": 20, "country_code": "US"},
    )
    data = resp.json()
    assert data["total_fare"] == 25.0
    assert data["currency_code"] == "USD"
    assert data["formatted_total"] == "$25.00"


@pytest.mark.asyncio
async def test_departure_time(client: AsyncClient):
    pickup = datetime(2026, 3, 14, 18, 0, tzinfo=timezone.utc)
    resp = await client.post(
        "/api/v1/fares/departure-time",
        json={"scheduled_pickup_at": _iso(pickup), "eta_minutes": 25},
    )
    departure = datetime.fromisoformat(resp.json()["departure_at"].replace("Z", "+00:00"))
    assert departure == pickup - timedelta(minutes=35)


# ── Telemetry ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_telemetry_summary(client: AsyncClient):
    resp = await client.post(
        "/api/v1/telemetry/summary",
        json={
            "points": [
                {"lat": 0, "lng": 0, "timestamp_ms": 0},
                {"lat": 1, "lng": 0, "timestamp_ms": 3_600_000},
            ]
        },
    )
    data = resp.json()
    assert data["distance_km"] == pytest.approx(111.19, abs=0.01)
    assert data["duration_minutes"] == 60
    assert data["average_speed_km_h"] == pytest.approx(111.19, abs=0.01)
    assert data["idle"] is False


@pytest.mark.asyncio
async def test_telemetry_empty_trace_is_idle(client: AsyncClient):
    resp = await client.post("/api/v1/telemetry/summary", json={"points": []})
    data = resp.json()
    assert data["distance_km"] == 0
    assert data["idle"] is True
