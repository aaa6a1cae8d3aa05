"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
attribute filters only: category, text, city, stars and H3 cell
membership.  Radius containment is decided in-process by ``NearbySearch``,
never by the database.

Rows are returned as domain entities (``Place`` / ``Hotel``) so cached
search results hold no ORM state.
"""

from __future__ import annotations

from typing import Iterable, Optional

from geoalchemy2.functions import ST_MakePoint, ST_SetSRID
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import HotelModel, PointOfInterestModel
from tourgeo.config import settings
from tourgeo.domain.entities import GeoPoint, Hotel, Place
from tourgeo.domain.search import CandidateFilter, point_h3_cell


def to_place(row) -> Place:
    return Place(
        id=row.id,
        name=row.name,
        location=GeoPoint(row.latitude, row.longitude),
        category=row.category,
        rating=row.rating or 0.0,
        description=row.description or "",
        address=row.address or "",
        created_at=row.created_at,
    )


def to_hotel(row) -> Hotel:
    return Hotel(
        id=row.id,
        name=row.name,
        location=GeoPoint(row.latitude, row.longitude),
        city=row.city or "",
        stars=row.stars or 0,
        rating=row.rating or 0.0,
        address=row.address or "",
        created_at=row.created_at,
    )


def contains_pattern(text: str) -> str:
    """``ILIKE`` pattern matching *text* literally anywhere; pair with ``escape="\\"``."""
    escaped = text.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class _GeoRepository:
    model = None  # set by subclasses

    def __init__(self, session: AsyncSession, h3_resolution: int = settings.h3_resolution):
        self.session = session
        self.h3_resolution = h3_resolution

    @staticmethod
    def _point(latitude: float, longitude: float):
        """PostGIS point expression (x = longitude, y = latitude)."""
        return ST_SetSRID(ST_MakePoint(longitude, latitude), 4326)

    def _location_columns(self, latitude: float, longitude: float) -> dict:
        location = GeoPoint(latitude, longitude)
        return {
            "latitude": latitude,
            "longitude": longitude,
            "point": self._point(latitude, longitude),
            "h3_cell": point_h3_cell(location, self.h3_resolution),
        }

    def _base_query(self, filters: CandidateFilter):
        query = select(self.model).where(self.model.is_active.is_(True))
        if filters.cells is not None:
            query = query.where(self.model.h3_cell.in_(sorted(filters.cells)))
        return query

    async def count_active(self) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(self.model)
            .where(self.model.is_active.is_(True))
        )
        return result.scalar() or 0


class PointOfInterestRepository(_GeoRepository):
    model = PointOfInterestModel

    async def create_poi(
        self,
        *,
        name: str,
        latitude: float,
        longitude: float,
        category: str = "other",
        rating: float = 0.0,
        description: str = "",
        address: str = "",
        **extra,
    ):
        poi = self.model(
            name=name,
            category=category,
            rating=rating,
            description=description,
            address=address,
            **self._location_columns(latitude, longitude),
            **extra,
        )
        self.session.add(poi)
        await self.session.flush()
        return poi

    async def get_by_id(self, poi_id: int) -> Optional[Place]:
        row = await self.session.get(self.model, poi_id)
        if row is None or not row.is_active:
            return None
        return to_place(row)

    async def get_by_ids(self, poi_ids: Iterable[int]) -> dict[int, Place]:
        ids = set(poi_ids)
        if not ids:
            return {}
        result = await self.session.execute(
            select(self.model).where(
                self.model.id.in_(ids), self.model.is_active.is_(True)
            )
        )
        return {row.id: to_place(row) for row in result.scalars().all()}

    async def find_candidates(self, filters: CandidateFilter) -> list[Place]:
        query = self._base_query(filters)
        if filters.category:
            query = query.where(self.model.category == filters.category)
        if filters.text:
            pattern = contains_pattern(filters.text)
            query = query.where(
                or_(
                    self.model.name.ilike(pattern, escape="\\"),
                    self.model.description.ilike(pattern, escape="\\"),
                )
            )
        result = await self.session.execute(query)
        return [to_place(row) for row in result.scalars().all()]


class HotelRepository(_GeoRepository):
    model = HotelModel

    async def create_hotel(
        self,
        *,
        name: str,
        latitude: float,
        longitude: float,
        city: str = "",
        stars: int = 0,
        rating: float = 0.0,
        address: str = "",
        **extra,
    ):
        hotel = self.model(
            name=name,
            city=city,
            stars=stars,
            rating=rating,
            address=address,
            **self._location_columns(latitude, longitude),
            **extra,
        )
        self.session.add(hotel)
        await self.session.flush()
        return hotel

    async def get_by_id(self, hotel_id: int) -> Optional[Hotel]:
        row = await self.session.get(self.model, hotel_id)
        if row is None or not row.is_active:
            return None
        return to_hotel(row)

    async def find_candidates(self, filters: CandidateFilter) -> list[Hotel]:
        query = self._base_query(filters)
        city = filters.get("city")
        if city:
            query = query.where(self.model.city.ilike(contains_pattern(city), escape="\\"))
        min_stars = filters.get("min_stars")
        if min_stars is not None:
            query = query.where(self.model.stars >= min_stars)
        if filters.text:
            query = query.where(self.model.name.ilike(contains_pattern(filters.text), escape="\\"))
        result = await self.session.execute(query)
        return [to_hotel(row) for row in result.scalars().all()]
