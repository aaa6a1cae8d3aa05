"""
Route endpoints
===============

POST /api/v1/routes -- synthesize a route through existing POIs, in order
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tourgeo.api.dependencies import get_db, get_route_synthesizer
from tourgeo.api.middleware import limiter
from tourgeo.api.schemas import ErrorResponse, RouteCreateRequest, RouteResponse
from tourgeo.config import settings
from tourgeo.domain.entities import Waypoint
from tourgeo.domain.errors import NotFound
from tourgeo.domain.routing import RouteSynthesizer
from tourgeo.infrastructure.repositories import PointOfInterestRepository

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post(
    "",
    response_model=RouteResponse,
    summary="Build a route through existing points of interest",
    description=(
        "Waypoints are visited in the order given.  Distance and time come "
        "from the directions provider when it answers, otherwise from a "
        "straight-line estimate.  Fewer than two waypoints yields an empty route."
    ),
    responses={404: {"model": ErrorResponse, "description": "Unknown POI ids."}},
)
@limiter.limit(settings.rate_limit)
async def create_route(
    request: Request,
    body: RouteCreateRequest,
    db: AsyncSession = Depends(get_db),
    synthesizer: RouteSynthesizer = Depends(get_route_synthesizer),
):
    found = await PointOfInterestRepository(db).get_by_ids(body.waypoint_ids)

    # ── Resolve every id before synthesis ─────────────────────────
    missing = [i for i in dict.fromkeys(body.waypoint_ids) if i not in found]
    if missing:
        raise NotFound(f"Points of interest not found: {missing}", missing_ids=missing)

    waypoints = [Waypoint.from_place(found[i]) for i in body.waypoint_ids]
    route = await synthesizer.build_route(
        waypoints, transport_mode=body.transport_mode, difficulty=body.difficulty
    )
    return RouteResponse.from_domain(route)
