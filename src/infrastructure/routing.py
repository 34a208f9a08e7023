"""
Routing-provider client (public OSRM + Nominatim).

Only used for quote-time distance/duration, ETAs for reservations and
address look-up.  Maps are never rendered in-app: navigation hands off to
the native Google / Apple Maps apps through deep links.

Failures are returned as ``success=False`` results with the error message
instead of raising; the route quote endpoint answers 502 with that message.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx

from src.config import settings
from src.domain.entities import Coordinates

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.34
_IOS_AGENT = re.compile(r"iPhone|iPad|iPod", re.IGNORECASE)


@dataclass(frozen=True)
class RouteResult:
    success: bool
    distance_meters: float = 0.0
    duration_seconds: float = 0.0
    error: Optional[str] = None

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000

    @property
    def distance_miles(self) -> float:
        return self.distance_meters / METERS_PER_MILE

    @property
    def duration_minutes(self) -> int:
        return math.ceil(self.duration_seconds / 60)


@dataclass(frozen=True)
class EtaResult:
    success: bool
    eta_minutes: int = 0
    error: Optional[str] = None


@dataclass(frozen=True)
class GeocodeResult:
    success: bool
    lat: float = 0.0
    lng: float = 0.0
    error: Optional[str] = None


class RoutingClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        osrm_base_url: str = settings.osrm_base_url,
        nominatim_base_url: str = settings.nominatim_base_url,
    ):
        self.client = client
        self.osrm_base_url = osrm_base_url.rstrip("/")
        self.nominatim_base_url = nominatim_base_url.rstrip("/")

    async def calculate_route(
        self, origin: Coordinates, destination: Coordinates
    ) -> RouteResult:
        url = (
            f"{self.osrm_base_url}/route/v1/driving/"
            f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        )
        try:
            response = await self.client.get(url, params={"overview": "false"})
            response.raise_for_status()
            data = response.json()
            if data.get("code") != "Ok" or not data.get("routes"):
                return RouteResult(success=False, error="No route found")
            route = data["routes"][0]
            return RouteResult(
                success=True,
                distance_meters=float(route["distance"]),
                duration_seconds=float(route["duration"]),
            )
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.warning("Routing calculation failed: %s", exc)
            return RouteResult(success=False, error=str(exc) or "Failed to calculate route")

    async def calculate_eta(
        self,
        origin: Coordinates,
        destination: Coordinates,
        traffic_buffer: float = settings.eta_traffic_buffer,
    ) -> EtaResult:
        """Route duration padded by *traffic_buffer* (15 % by default)."""
        route = await self.calculate_route(origin, destination)
        if not route.success:
            return EtaResult(success=False, error=route.error)
        return EtaResult(
            success=True, eta_minutes=math.ceil(route.duration_minutes * traffic_buffer)
        )

    async def geocode_address(self, address: str) -> GeocodeResult:
        """Rate limited upstream -- use sparingly."""
        try:
            response = await self.client.get(
                f"{self.nominatim_base_url}/search",
                params={"format": "json", "q": address, "limit": 1},
            )
            response.raise_for_status()
            data = response.json()
            if not data:
                return GeocodeResult(success=False, error="Address not found")
            return GeocodeResult(
                success=True, lat=float(data[0]["lat"]), lng=float(data[0]["lon"])
            )
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.warning("Geocoding failed for %r: %s", address, exc)
            return GeocodeResult(success=False, error=str(exc) or "Geocoding failed")


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": settings.routing_user_agent},
        timeout=settings.routing_timeout_seconds,
    )


# ── Deep links ────────────────────────────────────────────────────────


def generate_navigation_links(
    destination: Coordinates, label: Optional[str] = None
) -> dict[str, str]:
    lat, lng = destination.lat, destination.lng
    apple = f"http://maps.apple.com/?daddr={lat},{lng}&dirflg=d"
    if label:
        apple += f"&daddr_name={quote(label, safe='')}"
    return {
        "google_maps": (
            f"https://www.google.com/maps/dir/?api=1&destination={lat},{lng}"
            "&travelmode=driving"
        ),
        "apple_maps": apple,
    }


def get_navigation_url(
    destination: Coordinates, user_agent: str, label: Optional[str] = None
) -> str:
    """Apple Maps for iOS devices, Google Maps for everything else."""
    links = generate_navigation_links(destination, label)
    return links["apple_maps"] if _IOS_AGENT.search(user_agent) else links["google_maps"]
