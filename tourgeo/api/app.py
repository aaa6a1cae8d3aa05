"""
FastAPI application factory.

* Registers routes for nearby search, route synthesis, map utilities and admin.
* Holds the shared search cache and route synthesizer on ``app.state``.
* Applies rate-limiting middleware and maps domain errors to HTTP statuses.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from tourgeo.api.middleware import limiter
from tourgeo.api.routes import admin, maps, places, route_planning
from tourgeo.config import settings
from tourgeo.domain.errors import NotFound, TourGeoError
from tourgeo.domain.routing import RoutePolicy, RouteSynthesizer
from tourgeo.infrastructure.cache import ResultCache
from tourgeo.infrastructure.directions import OSRMDirectionsProvider

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    provider = settings.directions_base_url or "none"
    logger.info("TourGeo API starting (directions provider: %s)", provider)
    yield
    removed = app.state.result_cache.invalidate()
    logger.info("TourGeo API stopped; dropped %d cached searches", removed)


def build_route_synthesizer() -> RouteSynthesizer:
    provider = None
    if settings.directions_base_url:
        provider = OSRMDirectionsProvider(
            settings.directions_base_url, timeout=settings.directions_timeout_seconds
        )
    return RouteSynthesizer(
        policy=RoutePolicy.from_settings(settings),
        provider=provider,
        timeout_seconds=settings.directions_timeout_seconds,
    )


async def _domain_error_handler(request: Request, exc: TourGeoError) -> JSONResponse:
    content = {"detail": str(exc)}
    if isinstance(exc, NotFound) and exc.missing_ids:
        content["missing_ids"] = exc.missing_ids
    return JSONResponse(status_code=exc.status_code, content=content)


def create_app() -> FastAPI:
    app = FastAPI(
        title="TourGeo API",
        description=(
            "Location-aware tourism backend: radius search over points of "
            "interest and hotels, and ordered route synthesis with a "
            "directions provider and a local straight-line fallback."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Shared services
    app.state.result_cache = ResultCache(max_entries=settings.search_cache_max_entries)
    app.state.route_synthesizer = build_route_synthesizer()

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(TourGeoError, _domain_error_handler)

    # Routers
    app.include_router(places.router, prefix="/api/v1")
    app.include_router(route_planning.router, prefix="/api/v1")
    app.include_router(maps.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
