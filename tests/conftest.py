"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL.  PostGIS-specific features (Geometry columns) are
mocked by using plain String columns in the test models, and the
repositories are subclassed to write WKT text instead of PostGIS calls.
"""

from typing import AsyncGenerator
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text, func
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from tourgeo.infrastructure.repositories import HotelRepository, PointOfInterestRepository


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


class TestBase(DeclarativeBase):
    pass


# Mirror the production models but without PostGIS Geometry columns
# (SQLite doesn't support them).

class TestPointOfInterestModel(TestBase):
    __tablename__ = "pois"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, default="")
    category = Column(String(32), nullable=False, default="other")
    rating = Column(Float, default=0.0)
    address = Column(String(500), default="")
    point = Column(String, nullable=True)  # stub for Geometry
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    h3_cell = Column(String(20), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class TestHotelModel(TestBase):
    __tablename__ = "hotels"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    city = Column(String(120), nullable=False, default="")
    stars = Column(Integer, default=0, nullable=False)
    rating = Column(Float, default=0.0)
    address = Column(String(500), default="")
    point = Column(String, nullable=True)  # stub for Geometry
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    h3_cell = Column(String(20), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class _WKTPoint:
    @staticmethod
    def _point(latitude: float, longitude: float):
        return f"POINT({longitude} {latitude})"


class TestPointOfInterestRepository(_WKTPoint, PointOfInterestRepository):
    """``PointOfInterestRepository`` over the SQLite-friendly test model."""

    model = TestPointOfInterestModel


class TestHotelRepository(_WKTPoint, HotelRepository):
    model = TestHotelModel


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database per test; tables created up front."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory):
    """Application wired to the test database and test repositories."""
    from tourgeo.api.app import create_app
    from tourgeo.api.dependencies import get_db
    from tourgeo.api.middleware import limiter

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    # Override repos at the module level where routes import them
    with (
        patch("tourgeo.api.routes.places.PointOfInterestRepository", TestPointOfInterestRepository),
        patch("tourgeo.api.routes.places.HotelRepository", TestHotelRepository),
        patch(
            "tourgeo.api.routes.route_planning.PointOfInterestRepository",
            TestPointOfInterestRepository,
        ),
        patch.object(limiter, "enabled", False),
    ):
        application = create_app()
        application.dependency_overrides[get_db] = _test_db
        yield application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
