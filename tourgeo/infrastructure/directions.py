"""
Directions provider client for OSRM-compatible routing services.

Calls ``/route/v1/{profile}/{lng,lat;...}`` with ``geometries=polyline``
so the returned geometry is already in the 1e5 encoded-polyline format.
Every failure mode (transport error, HTTP status, timeout, error code in
the payload, missing fields) is reported as ``ProviderUnavailable``.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from tourgeo.domain.entities import GeoPoint, RouteLeg
from tourgeo.domain.enums import TransportMode
from tourgeo.domain.errors import ProviderUnavailable
from tourgeo.domain.routing import Directions

logger = logging.getLogger(__name__)

# OSRM profile mapping; OSRM has no transit profile, walk instead.
OSRM_PROFILES = {
    TransportMode.WALKING: "foot",
    TransportMode.BICYCLING: "bike",
    TransportMode.DRIVING: "car",
    TransportMode.TRANSIT: "foot",
}


class OSRMDirectionsProvider:
    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        # Fresh client per request; no pooled state to close on shutdown.
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def build_url(self, points: Sequence[GeoPoint], mode: TransportMode) -> str:
        profile = OSRM_PROFILES.get(TransportMode(mode), "foot")
        coords = ";".join(f"{p.longitude},{p.latitude}" for p in points)
        return f"{self.base_url}/route/v1/{profile}/{coords}"

    async def get_directions(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        waypoints: Sequence[GeoPoint],
        mode: TransportMode,
    ) -> Directions:
        url = self.build_url([origin, *waypoints, destination], mode)
        params = {"overview": "full", "geometries": "polyline", "steps": "false"}
        logger.debug("Requesting directions %s", url)

        try:
            async with self._client() as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as exc:
            raise ProviderUnavailable(f"Directions request timed out: {exc!r}") from exc
        except httpx.HTTPStatusError as exc:
            raise ProviderUnavailable(
                f"Directions API error: {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(f"Directions request failed: {exc!r}") from exc
        except ValueError as exc:
            raise ProviderUnavailable("Directions API returned invalid JSON") from exc

        return self.parse(data)

    @staticmethod
    def parse(data: object) -> Directions:
        if not isinstance(data, dict) or data.get("code") != "Ok":
            code = data.get("code") if isinstance(data, dict) else None
            raise ProviderUnavailable(f"Directions API responded with code {code!r}")

        routes = data.get("routes")
        if not isinstance(routes, list) or not routes:
            raise ProviderUnavailable("Directions API returned no routes")

        try:
            best = routes[0]
            if not isinstance(best, dict):
                raise TypeError(f"route entry is {type(best).__name__}, not an object")
            distance = float(best["distance"])
            duration = float(best["duration"])
            legs = tuple(
                RouteLeg(
                    distance_meters=float(leg["distance"]),
                    duration_seconds=float(leg["duration"]),
                )
                for leg in best.get("legs") or []
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderUnavailable(f"Malformed directions payload: {exc!r}") from exc

        geometry = best.get("geometry")
        return Directions(
            distance_meters=distance,
            duration_seconds=duration,
            encoded_path=geometry if isinstance(geometry, str) else None,
            legs=legs,
        )
