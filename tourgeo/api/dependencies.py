"""FastAPI dependency injection helpers."""

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from tourgeo.domain.routing import RouteSynthesizer
from tourgeo.infrastructure.cache import ResultCache
from tourgeo.infrastructure.database import async_session_factory


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_cache(request: Request) -> ResultCache:
    """The application-wide search result cache."""
    return request.app.state.result_cache


def get_route_synthesizer(request: Request) -> RouteSynthesizer:
    return request.app.state.route_synthesizer
