"""
Map utility endpoints
=====================

GET  /api/v1/map/directions       -- route between coordinates (no stored POIs)
GET  /api/v1/map/distance         -- straight-line distance between two points
POST /api/v1/map/polyline/encode  -- points -> encoded path
POST /api/v1/map/polyline/decode  -- encoded path -> points
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from tourgeo.api.dependencies import get_route_synthesizer
from tourgeo.api.middleware import limiter
from tourgeo.api.schemas import (
    DistanceResponse,
    ErrorResponse,
    PointOut,
    PolylineDecodeRequest,
    PolylineEncodeRequest,
    PolylineResponse,
    RouteResponse,
)
from tourgeo.config import settings
from tourgeo.domain import polyline
from tourgeo.domain.distance import haversine_m
from tourgeo.domain.entities import GeoPoint, Waypoint
from tourgeo.domain.enums import Difficulty, TransportMode
from tourgeo.domain.errors import ValidationError
from tourgeo.domain.routing import RouteSynthesizer

router = APIRouter(prefix="/map", tags=["map"])


def parse_waypoint(raw: str) -> GeoPoint:
    """Parse ``"lat,lng"``."""
    try:
        lat, lng = (float(part) for part in raw.split(","))
    except ValueError:
        raise ValidationError(f"Waypoint {raw!r} must look like 'lat,lng'") from None
    return GeoPoint(lat, lng)


@router.get(
    "/directions",
    response_model=RouteResponse,
    summary="Directions between coordinates",
)
@limiter.limit(settings.rate_limit)
async def directions(
    request: Request,
    origin_lat: float = Query(..., ge=-90, le=90),
    origin_lng: float = Query(..., ge=-180, le=180),
    dest_lat: float = Query(..., ge=-90, le=90),
    dest_lng: float = Query(..., ge=-180, le=180),
    waypoint: list[str] = Query(
        default=[], description="Intermediate stops as 'lat,lng', in order."
    ),
    mode: TransportMode = TransportMode.DRIVING,
    difficulty: Optional[Difficulty] = None,
    synthesizer: RouteSynthesizer = Depends(get_route_synthesizer),
):
    if len(waypoint) > settings.max_waypoints - 2:
        raise ValidationError(f"At most {settings.max_waypoints - 2} intermediate waypoints")
    stops = [
        GeoPoint(origin_lat, origin_lng),
        *(parse_waypoint(w) for w in waypoint),
        GeoPoint(dest_lat, dest_lng),
    ]
    route = await synthesizer.build_route(
        [Waypoint(location=p) for p in stops], transport_mode=mode, difficulty=difficulty
    )
    return RouteResponse.from_domain(route)


@router.get("/distance", response_model=DistanceResponse, summary="Haversine distance")
@limiter.limit(settings.rate_limit)
async def distance(
    request: Request,
    lat1: float = Query(..., ge=-90, le=90),
    lng1: float = Query(..., ge=-180, le=180),
    lat2: float = Query(..., ge=-90, le=90),
    lng2: float = Query(..., ge=-180, le=180),
):
    meters = haversine_m(GeoPoint(lat1, lng1), GeoPoint(lat2, lng2))
    return DistanceResponse(meters=round(meters, 1), kilometers=round(meters / 1000, 3))


@router.post("/polyline/encode", response_model=PolylineResponse, summary="Encode a path")
@limiter.limit(settings.rate_limit)
async def encode_polyline(request: Request, body: PolylineEncodeRequest):
    points = [GeoPoint(p.latitude, p.longitude) for p in body.points]
    return PolylineResponse(
        encoded=polyline.encode(points),
        points=[PointOut(latitude=p.latitude, longitude=p.longitude) for p in points],
    )


@router.post(
    "/polyline/decode",
    response_model=PolylineResponse,
    summary="Decode a path",
    responses={400: {"model": ErrorResponse, "description": "Malformed polyline."}},
)
@limiter.limit(settings.rate_limit)
async def decode_polyline(request: Request, body: PolylineDecodeRequest):
    points = polyline.decode(body.encoded)
    return PolylineResponse(
        encoded=body.encoded,
        points=[PointOut(latitude=p.latitude, longitude=p.longitude) for p in points],
    )
