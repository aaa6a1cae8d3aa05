"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from tourgeo.config import settings
from tourgeo.domain.entities import MapRegion, Route
from tourgeo.domain.enums import Difficulty, TransportMode
from tourgeo.domain.search import Ranked, SearchResult


# ── Shared ────────────────────────────────────────────────────────────


class PointIn(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class PointOut(BaseModel):
    latitude: float
    longitude: float


class RegionResponse(BaseModel):
    latitude: float
    longitude: float
    latitude_delta: float
    longitude_delta: float

    @classmethod
    def from_domain(cls, region: MapRegion) -> RegionResponse:
        return cls(
            latitude=region.latitude,
            longitude=region.longitude,
            latitude_delta=region.latitude_delta,
            longitude_delta=region.longitude_delta,
        )


class Pagination(BaseModel):
    page: int
    page_size: int
    total: int
    pages: int

    @classmethod
    def from_result(cls, result: SearchResult) -> Pagination:
        return cls(
            page=result.page,
            page_size=result.page_size,
            total=result.total,
            pages=result.pages,
        )


# ── Nearby search ─────────────────────────────────────────────────────


class PlaceResponse(BaseModel):
    id: int
    name: str
    category: str
    rating: float
    description: str = ""
    address: str = ""
    latitude: float
    longitude: float
    created_at: Optional[datetime] = None
    distance_meters: Optional[float] = None

    @classmethod
    def from_ranked(cls, ranked: Ranked) -> PlaceResponse:
        place = ranked.entity
        return cls(
            id=place.id,
            name=place.name,
            category=place.category,
            rating=place.rating,
            description=place.description,
            address=place.address,
            latitude=place.location.latitude,
            longitude=place.location.longitude,
            created_at=place.created_at,
            distance_meters=round(ranked.distance_meters, 1),
        )


class HotelResponse(BaseModel):
    id: int
    name: str
    city: str
    stars: int
    rating: float
    address: str = ""
    latitude: float
    longitude: float
    created_at: Optional[datetime] = None
    distance_meters: Optional[float] = None

    @classmethod
    def from_ranked(cls, ranked: Ranked) -> HotelResponse:
        hotel = ranked.entity
        return cls(
            id=hotel.id,
            name=hotel.name,
            city=hotel.city,
            stars=hotel.stars,
            rating=hotel.rating,
            address=hotel.address,
            latitude=hotel.location.latitude,
            longitude=hotel.location.longitude,
            created_at=hotel.created_at,
            distance_meters=round(ranked.distance_meters, 1),
        )


class NearbyPlacesResponse(BaseModel):
    data: list[PlaceResponse]
    pagination: Pagination
    region: RegionResponse


class NearbyHotelsResponse(BaseModel):
    data: list[HotelResponse]
    pagination: Pagination
    region: RegionResponse


# ── Routes ────────────────────────────────────────────────────────────


class RouteCreateRequest(BaseModel):
    waypoint_ids: list[int] = Field(
        ...,
        max_length=settings.max_waypoints,
        description="POI ids in visiting order; duplicates are allowed.",
    )
    difficulty: Optional[Difficulty] = Field(
        None, description="Omit to classify from the total distance."
    )
    transport_mode: TransportMode = TransportMode.WALKING


class WaypointResponse(BaseModel):
    id: Optional[str] = None
    category: Optional[str] = None
    latitude: float
    longitude: float


class LegResponse(BaseModel):
    distance_meters: float
    duration_seconds: float


class RouteResponse(BaseModel):
    waypoints: list[WaypointResponse]
    total_distance_meters: float
    estimated_time_minutes: int
    difficulty: Difficulty
    encoded_path: Optional[str] = None
    legs: list[LegResponse] = []
    bounds: Optional[RegionResponse] = None
    source: str

    @classmethod
    def from_domain(cls, route: Route) -> RouteResponse:
        return cls(
            waypoints=[
                WaypointResponse(
                    id=w.id,
                    category=w.category,
                    latitude=w.location.latitude,
                    longitude=w.location.longitude,
                )
                for w in route.waypoints
            ],
            total_distance_meters=route.total_distance_meters,
            estimated_time_minutes=route.estimated_time_minutes,
            difficulty=route.difficulty,
            encoded_path=route.encoded_path,
            legs=[
                LegResponse(distance_meters=l.distance_meters, duration_seconds=l.duration_seconds)
                for l in route.legs
            ],
            bounds=RegionResponse.from_domain(route.bounds) if route.bounds else None,
            source=route.source,
        )


# ── Map utilities ─────────────────────────────────────────────────────


class DistanceResponse(BaseModel):
    meters: float
    kilometers: float


class PolylineEncodeRequest(BaseModel):
    points: list[PointIn]


class PolylineDecodeRequest(BaseModel):
    encoded: str


class PolylineResponse(BaseModel):
    encoded: str
    points: list[PointOut]


# ── Admin ─────────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    status: str = "ok"


class CacheStatsResponse(BaseModel):
    entries: int
    live_entries: int
    hits: int
    misses: int


class ErrorResponse(BaseModel):
    detail: str


class CacheClearResponse(BaseModel):
    removed: int
