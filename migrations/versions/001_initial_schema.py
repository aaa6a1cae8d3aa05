"""Initial schema with PostGIS extension, points of interest and hotels.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── pois ──────────────────────────────────────────────────────────
    op.create_table(
        "pois",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, default=""),
        sa.Column("category", sa.String(32), nullable=False, default="other"),
        sa.Column("rating", sa.Float, default=0.0),
        sa.Column("address", sa.String(500), default=""),
        sa.Column("point", Geometry("POINT", srid=4326), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("h3_cell", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean, default=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_pois_point", "pois", ["point"], postgresql_using="gist")
    op.create_index("idx_pois_cell", "pois", ["h3_cell"])
    op.create_index("idx_pois_category", "pois", ["category"])
    op.create_index("idx_pois_active", "pois", ["is_active"])
    op.create_index("idx_pois_created", "pois", ["created_at"])

    # ── hotels ────────────────────────────────────────────────────────
    op.create_table(
        "hotels",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("city", sa.String(120), nullable=False, default=""),
        sa.Column("stars", sa.Integer, default=0, nullable=False),
        sa.Column("rating", sa.Float, default=0.0),
        sa.Column("address", sa.String(500), default=""),
        sa.Column("point", Geometry("POINT", srid=4326), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("h3_cell", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean, default=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_hotels_point", "hotels", ["point"], postgresql_using="gist")
    op.create_index("idx_hotels_cell", "hotels", ["h3_cell"])
    op.create_index("idx_hotels_city", "hotels", ["city"])
    op.create_index("idx_hotels_active", "hotels", ["is_active"])


def downgrade() -> None:
    op.drop_table("hotels")
    op.drop_table("pois")
