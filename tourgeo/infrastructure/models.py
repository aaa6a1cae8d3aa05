"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``pois``    -- points of interest
* ``hotels``  -- accommodation

Indexes
-------
* **GIST** on the ``point`` geometry columns, kept for ad-hoc spatial
  queries; the application itself never issues geo operators.
* **B-Tree** on ``h3_cell`` (candidate prefilter), ``category``/``city``,
  ``is_active`` and ``created_at``.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    func,
)
from geoalchemy2 import Geometry

from .database import Base


class PointOfInterestModel(Base):
    __tablename__ = "pois"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, default="")
    category = Column(String(32), nullable=False, default="other")
    rating = Column(Float, default=0.0)
    address = Column(String(500), default="")

    # Stored as PostGIS geometry for spatial indexing
    point = Column(Geometry("POINT", srid=4326), nullable=False)

    # Also stored as plain floats for fast reads (avoids ST_X / ST_Y)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    h3_cell = Column(String(20), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_pois_point", "point", postgresql_using="gist"),
        Index("idx_pois_cell", "h3_cell"),
        Index("idx_pois_category", "category"),
        Index("idx_pois_active", "is_active"),
        Index("idx_pois_created", "created_at"),
    )


class HotelModel(Base):
    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    city = Column(String(120), nullable=False, default="")
    stars = Column(Integer, default=0, nullable=False)
    rating = Column(Float, default=0.0)
    address = Column(String(500), default="")

    point = Column(Geometry("POINT", srid=4326), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    h3_cell = Column(String(20), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_hotels_point", "point", postgresql_using="gist"),
        Index("idx_hotels_cell", "h3_cell"),
        Index("idx_hotels_city", "city"),
        Index("idx_hotels_active", "is_active"),
    )
