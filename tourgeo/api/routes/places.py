"""
Nearby search endpoints
=======================

GET /api/v1/pois/nearby    -- points of interest within a radius
GET /api/v1/hotels/nearby  -- hotels within a radius

Both are cached for ``SEARCH_CACHE_TTL_SECONDS`` per canonical query.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tourgeo.api.dependencies import get_cache, get_db
from tourgeo.api.middleware import limiter
from tourgeo.api.schemas import (
    HotelResponse,
    NearbyHotelsResponse,
    NearbyPlacesResponse,
    Pagination,
    PlaceResponse,
    RegionResponse,
)
from tourgeo.config import settings
from tourgeo.domain.distance import bounding_region
from tourgeo.domain.entities import GeoPoint
from tourgeo.domain.enums import POICategory, SortBy, SortOrder
from tourgeo.domain.search import NearbySearch, SearchQuery, SearchResult
from tourgeo.infrastructure.cache import ResultCache
from tourgeo.infrastructure.repositories import HotelRepository, PointOfInterestRepository

router = APIRouter(tags=["places"])


def _nearby(source, cache: ResultCache, namespace: str) -> NearbySearch:
    return NearbySearch(
        source,
        cache,
        namespace=namespace,
        ttl_seconds=settings.search_cache_ttl_seconds,
        precision=settings.search_center_precision,
        h3_resolution=settings.h3_resolution,
        h3_max_ring=settings.h3_max_ring,
    )


def _region(query: SearchQuery, result: SearchResult) -> RegionResponse:
    points = [query.center, *(r.entity.location for r in result.items)]
    return RegionResponse.from_domain(bounding_region(points))


@router.get(
    "/pois/nearby",
    response_model=NearbyPlacesResponse,
    summary="Points of interest within a radius",
)
@limiter.limit(settings.rate_limit)
async def nearby_pois(
    request: Request,
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius_meters: float = Query(
        settings.default_radius_meters, ge=0, le=settings.max_radius_meters
    ),
    category: Optional[POICategory] = None,
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sort_by: str = Query(SortBy.CREATED_AT.value, description="distance, rating or createdAt"),
    sort_order: SortOrder = SortOrder.DESC,
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_cache),
):
    query = SearchQuery(
        center=GeoPoint(latitude, longitude),
        radius_meters=radius_meters,
        category=category.value if category else None,
        text=search,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    result = await _nearby(PointOfInterestRepository(db), cache, "pois").search(query)
    return NearbyPlacesResponse(
        data=[PlaceResponse.from_ranked(r) for r in result.items],
        pagination=Pagination.from_result(result),
        region=_region(query, result),
    )


@router.get(
    "/hotels/nearby",
    response_model=NearbyHotelsResponse,
    summary="Hotels within a radius",
)
@limiter.limit(settings.rate_limit)
async def nearby_hotels(
    request: Request,
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius_meters: float = Query(
        settings.default_radius_meters, ge=0, le=settings.max_radius_meters
    ),
    city: Optional[str] = Query(None, max_length=120),
    min_stars: Optional[int] = Query(None, ge=1, le=5),
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sort_by: str = Query(SortBy.RATING.value, description="distance, rating or createdAt"),
    sort_order: SortOrder = SortOrder.DESC,
    db: AsyncSession = Depends(get_db),
    cache: ResultCache = Depends(get_cache),
):
    attributes = tuple(
        (name, value)
        for name, value in (("city", city), ("min_stars", min_stars))
        if value is not None
    )
    query = SearchQuery(
        center=GeoPoint(latitude, longitude),
        radius_meters=radius_meters,
        text=search,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
        attributes=attributes,
    )
    result = await _nearby(HotelRepository(db), cache, "hotels").search(query)
    return NearbyHotelsResponse(
        data=[HotelResponse.from_ranked(r) for r in result.items],
        pagination=Pagination.from_result(result),
        region=_region(query, result),
    )
