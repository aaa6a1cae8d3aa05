"""
Route Synthesis
===============

Waypoints are routed in exactly the order given -- no reordering, no
optimisation.

Provider path
-------------
When a directions provider is configured it is called with the ordered
waypoints under a timeout.  On success its distance, duration and
polyline are taken verbatim (it knows the real roads).

Local estimate
--------------
If there is no provider, or the call times out or fails (bad responses
arrive as ``ProviderUnavailable``; other errors are logged with a traceback):

  distance   = sum of haversine hops between consecutive waypoints
  difficulty = supplied, else classified from distance (configurable breakpoints)
  speed      = difficulty speed when walking, transport-mode speed otherwise
  minutes    = round_half_up(distance_km / speed * 60)
  path       = straight-line polyline through the waypoints

Complexity: O(n) in the number of waypoints.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol, Sequence

from . import polyline
from .distance import bounding_region, haversine_m
from .entities import GeoPoint, Route, RouteLeg, Waypoint
from .enums import Difficulty, TransportMode
from .errors import MalformedPolyline, ProviderUnavailable, ValidationError

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ── Provider contract ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Directions:
    distance_meters: float
    duration_seconds: float
    encoded_path: Optional[str] = None
    legs: tuple[RouteLeg, ...] = ()


class DirectionsProvider(Protocol):
    async def get_directions(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        waypoints: Sequence[GeoPoint],
        mode: TransportMode,
    ) -> Directions:
        """Raise ``ProviderUnavailable`` on any failure."""
        ...


# ── Estimation policy ─────────────────────────────────────────────────


DEFAULT_DIFFICULTY_SPEEDS = {
    Difficulty.EASY: 4.0,
    Difficulty.MEDIUM: 5.0,
    Difficulty.HARD: 6.0,
}

DEFAULT_MODE_SPEEDS = {
    TransportMode.WALKING: 5.0,
    TransportMode.BICYCLING: 15.0,
    TransportMode.DRIVING: 50.0,
    TransportMode.TRANSIT: 20.0,
}


@dataclass(frozen=True)
class RoutePolicy:
    """Speeds and difficulty breakpoints.  Policy, not physics: all configurable."""

    difficulty_speeds_kmh: Mapping[Difficulty, float] = field(
        default_factory=lambda: dict(DEFAULT_DIFFICULTY_SPEEDS)
    )
    mode_speeds_kmh: Mapping[TransportMode, float] = field(
        default_factory=lambda: dict(DEFAULT_MODE_SPEEDS)
    )
    medium_from_km: float = 5.0
    hard_from_km: float = 10.0

    @classmethod
    def from_settings(cls, settings) -> RoutePolicy:
        difficulty = dict(DEFAULT_DIFFICULTY_SPEEDS)
        difficulty.update(
            {Difficulty(k): float(v) for k, v in settings.difficulty_speeds_kmh.items()}
        )
        modes = dict(DEFAULT_MODE_SPEEDS)
        modes.update(
            {TransportMode(k): float(v) for k, v in settings.mode_speeds_kmh.items()}
        )
        return cls(
            difficulty_speeds_kmh=difficulty,
            mode_speeds_kmh=modes,
            medium_from_km=settings.medium_from_km,
            hard_from_km=settings.hard_from_km,
        )

    def classify(self, distance_km: float) -> Difficulty:
        if distance_km >= self.hard_from_km:
            return Difficulty.HARD
        if distance_km >= self.medium_from_km:
            return Difficulty.MEDIUM
        return Difficulty.EASY

    def speed_for(self, mode: TransportMode, difficulty: Difficulty) -> float:
        if mode == TransportMode.WALKING:
            return self.difficulty_speeds_kmh[difficulty]
        return self.mode_speeds_kmh[mode]

    def estimate_seconds(
        self, distance_m: float, mode: TransportMode, difficulty: Difficulty
    ) -> float:
        speed = self.speed_for(mode, difficulty)
        if speed <= 0:
            raise ValidationError(f"Non-positive speed configured for {mode.value}/{difficulty.value}")
        return distance_m / 1000 / speed * 3600

    def estimate_minutes(
        self, distance_m: float, mode: TransportMode, difficulty: Difficulty
    ) -> int:
        return round_half_up(self.estimate_seconds(distance_m, mode, difficulty) / 60)


# ── Synthesizer ───────────────────────────────────────────────────────


class RouteSynthesizer:
    """High-level API used by the route and map endpoints."""

    def __init__(
        self,
        policy: Optional[RoutePolicy] = None,
        provider: Optional[DirectionsProvider] = None,
        timeout_seconds: float = 5.0,
    ):
        self.policy = policy or RoutePolicy()
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    async def build_route(
        self,
        waypoints: Sequence[Waypoint],
        transport_mode: TransportMode = TransportMode.WALKING,
        difficulty: Optional[Difficulty] = None,
    ) -> Route:
        ordered = tuple(waypoints)
        transport_mode = TransportMode(transport_mode)
        difficulty = Difficulty(difficulty) if difficulty is not None else None

        if len(ordered) < 2:
            # Nothing to route yet.
            return Route(
                waypoints=ordered,
                difficulty=difficulty or Difficulty.EASY,
                bounds=bounding_region([w.location for w in ordered]) if ordered else None,
            )

        if self.provider is not None:
            try:
                directions = await asyncio.wait_for(
                    self._ask_provider(ordered, transport_mode),
                    timeout=self.timeout_seconds,
                )
            except ProviderUnavailable as exc:
                logger.warning("Directions provider unavailable, estimating locally: %s", exc)
            except asyncio.TimeoutError:
                logger.warning(
                    "Directions provider timed out after %.1fs, estimating locally",
                    self.timeout_seconds,
                )
            except Exception:
                logger.exception("Directions provider failed unexpectedly, estimating locally")
            else:
                return self._from_directions(ordered, directions, difficulty)

        return self.estimate(ordered, transport_mode, difficulty)

    def estimate(
        self,
        waypoints: Sequence[Waypoint],
        transport_mode: TransportMode = TransportMode.WALKING,
        difficulty: Optional[Difficulty] = None,
    ) -> Route:
        """Straight-line estimate; never touches the provider."""
        points = [w.location for w in waypoints]
        if len(points) < 2:
            return Route(waypoints=tuple(waypoints), difficulty=difficulty or Difficulty.EASY)

        hops = [haversine_m(p, q) for p, q in zip(points, points[1:])]
        total = sum(hops)
        difficulty = difficulty or self.policy.classify(total / 1000)
        legs = tuple(
            RouteLeg(
                distance_meters=hop,
                duration_seconds=self.policy.estimate_seconds(hop, transport_mode, difficulty),
            )
            for hop in hops
        )
        return Route(
            waypoints=tuple(waypoints),
            total_distance_meters=total,
            estimated_time_minutes=self.policy.estimate_minutes(total, transport_mode, difficulty),
            difficulty=difficulty,
            encoded_path=polyline.encode(points),
            legs=legs,
            bounds=bounding_region(points),
            source="estimate",
        )

    async def _ask_provider(
        self, waypoints: Sequence[Waypoint], mode: TransportMode
    ) -> Directions:
        assert self.provider is not None
        points = [w.location for w in waypoints]
        directions = await self.provider.get_directions(
            points[0], points[-1], points[1:-1], mode
        )
        if directions.distance_meters < 0 or directions.duration_seconds < 0:
            raise ProviderUnavailable("Provider reported a negative distance or duration")
        return directions

    def _from_directions(
        self,
        waypoints: Sequence[Waypoint],
        directions: Directions,
        difficulty: Optional[Difficulty],
    ) -> Route:
        locations = [w.location for w in waypoints]
        encoded = directions.encoded_path
        path = locations
        if encoded:
            try:
                path = polyline.decode(encoded) or locations
            except MalformedPolyline as exc:
                # Distance/duration are still usable; only the geometry is not.
                logger.warning("Provider returned a corrupt polyline, using waypoints: %s", exc)
                encoded = None
        if not encoded:
            encoded = polyline.encode(locations)

        return Route(
            waypoints=tuple(waypoints),
            total_distance_meters=directions.distance_meters,
            estimated_time_minutes=round_half_up(directions.duration_seconds / 60),
            difficulty=difficulty or self.policy.classify(directions.distance_meters / 1000),
            encoded_path=encoded,
            legs=directions.legs,
            bounds=bounding_region(path),
            source="provider",
        )
