"""
Domain value objects and entities.

All of these are owned by the caller and treated as immutable: the result
cache stores them by value, so nothing here may be mutated after creation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import Difficulty
from .errors import ValidationError


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValidationError(f"Latitude {self.latitude} outside [-90, 90]")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValidationError(f"Longitude {self.longitude} outside [-180, 180]")


@dataclass(frozen=True)
class MapRegion:
    """Map viewport: center plus the span it should show."""

    latitude: float
    longitude: float
    latitude_delta: float
    longitude_delta: float


# ── Searchable entities ───────────────────────────────────────────────


@dataclass(frozen=True)
class Place:
    """A point of interest."""

    id: int
    name: str
    location: GeoPoint
    category: str = "other"
    rating: float = 0.0
    description: str = ""
    address: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Hotel:
    id: int
    name: str
    location: GeoPoint
    city: str = ""
    stars: int = 0
    rating: float = 0.0
    address: str = ""
    created_at: Optional[datetime] = None


# ── Routing ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Waypoint:
    location: GeoPoint
    id: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_place(cls, place: Place) -> Waypoint:
        return cls(location=place.location, id=str(place.id), category=place.category)


@dataclass(frozen=True)
class RouteLeg:
    distance_meters: float
    duration_seconds: float


@dataclass(frozen=True)
class Route:
    """
    An ordered route.  Fewer than two waypoints always means zero distance
    and zero time; ``encoded_path`` is ``None`` only in that case.
    """

    waypoints: tuple[Waypoint, ...] = ()
    total_distance_meters: float = 0.0
    estimated_time_minutes: int = 0
    difficulty: Difficulty = Difficulty.EASY
    encoded_path: Optional[str] = None
    legs: tuple[RouteLeg, ...] = ()
    bounds: Optional[MapRegion] = None
    source: str = "estimate"  # "provider" | "estimate"
