"""
Admin / observability endpoints
===============================

GET    /api/v1/admin/health -- simple health check
GET    /api/v1/admin/cache  -- search cache counters
DELETE /api/v1/admin/cache  -- drop every cached search result
"""

from fastapi import APIRouter, Depends, Request

from tourgeo.api.dependencies import get_cache
from tourgeo.api.middleware import limiter
from tourgeo.api.schemas import CacheClearResponse, CacheStatsResponse, HealthResponse
from tourgeo.config import settings
from tourgeo.infrastructure.cache import ResultCache

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/cache", response_model=CacheStatsResponse, summary="Search cache stats")
@limiter.limit(settings.rate_limit)
async def cache_stats(request: Request, cache: ResultCache = Depends(get_cache)):
    return CacheStatsResponse(**cache.stats)


@router.delete("/cache", response_model=CacheClearResponse, summary="Clear search cache")
@limiter.limit(settings.rate_limit)
async def clear_cache(request: Request, cache: ResultCache = Depends(get_cache)):
    return CacheClearResponse(removed=cache.invalidate())


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
