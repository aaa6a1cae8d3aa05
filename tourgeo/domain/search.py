"""
Nearby Search
=============

1. **Validate** the query; a bad query never reaches the cache or the
   repository.
2. **Prefilter** (optional) -- cover the search disk with H3 hexagons and
   ask the repository for candidates in those cells.  Cells are a plain
   attribute on each row, so the repository needs no geo operators.
3. **Radius filter** -- haversine distance from the centre, keeping
   ``distance <= radius`` (inclusive boundary).
4. **Sort** -- distance; rating with distance as tie-break; or creation time.
5. **Paginate** -- strictly after filtering and sorting.

Step 2 runs through ``ResultCache`` under a canonical key (centre rounded
to ``precision`` decimals + radius + filters); steps 3-5 always use the
exact centre, so a shared key never leaks another centre's distances.

Complexity
----------
Let N = candidates returned by the repository.

* Prefilter:  O(k^2) cells for a ring radius k (bounded by ``h3_max_ring``)
* Filtering:  O(N)
* Sorting:    O(N log N)
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional, Protocol, Sequence

import h3

from .distance import EARTH_RADIUS_M, haversine_m
from .entities import GeoPoint
from .enums import SortBy, SortOrder
from .errors import ValidationError

if TYPE_CHECKING:
    from tourgeo.infrastructure.cache import ResultCache


# ── Contracts ─────────────────────────────────────────────────────────


class Locatable(Protocol):
    id: Any
    location: GeoPoint
    rating: float
    created_at: Optional[datetime]


@dataclass(frozen=True)
class CandidateFilter:
    """Attribute-only predicates handed to the repository."""

    category: Optional[str] = None
    text: Optional[str] = None
    cells: Optional[frozenset[str]] = None
    attributes: tuple[tuple[str, Any], ...] = ()

    def get(self, name: str, default: Any = None) -> Any:
        return dict(self.attributes).get(name, default)


class CandidateSource(Protocol):
    async def find_candidates(self, filters: CandidateFilter) -> Sequence[Locatable]: ...


@dataclass(frozen=True)
class SearchQuery:
    center: Optional[GeoPoint]
    radius_meters: float = 10_000.0
    category: Optional[str] = None
    text: Optional[str] = None
    page: int = 1
    page_size: int = 20
    sort_by: SortBy = SortBy.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC
    attributes: tuple[tuple[str, Any], ...] = field(default=())

    def validate(self) -> None:
        if self.center is None:
            raise ValidationError("Search center is required")
        if self.radius_meters is None or not self.radius_meters >= 0:
            raise ValidationError(f"radius_meters must be >= 0, got {self.radius_meters}")
        if self.page < 1:
            raise ValidationError(f"page must be >= 1, got {self.page}")
        if self.page_size < 1:
            raise ValidationError(f"page_size must be >= 1, got {self.page_size}")
        SortBy.parse(self.sort_by)
        try:
            SortOrder(self.sort_order)
        except ValueError:
            raise ValidationError(f"Unsupported sort order {self.sort_order!r}") from None

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class Ranked:
    entity: Any
    distance_meters: float


@dataclass(frozen=True)
class SearchResult:
    items: tuple[Ranked, ...]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0


# ── H3 prefilter ──────────────────────────────────────────────────────

EDGE_SLACK = 0.9


def point_h3_cell(point: GeoPoint, resolution: int = 7) -> str:
    """Map a geo-point to its H3 hexagonal cell index.  O(1)."""
    return h3.latlng_to_cell(point.latitude, point.longitude, resolution)


def covering_cells(
    center: GeoPoint, radius_m: float, resolution: int = 7, max_ring: int = 30
) -> Optional[frozenset[str]]:
    """
    Cells whose hexagons may hold a point within ``radius_m`` of ``center``.

    Neighbouring cell centres are at least 1.5 edge lengths apart per ring,
    so a point at distance d sits in a cell at most
    ``ceil((d + edge) / (1.5 * edge))`` rings out; one extra ring absorbs
    projection distortion.  Cell size varies by up to 2x over the globe, so
    ``edge`` is the shortest edge of the centre cell itself, shrunk by
    ``EDGE_SLACK`` for drift across the disk.  Returns ``None`` (no
    prefilter) when the ring count exceeds ``max_ring``.
    """
    cell = point_h3_cell(center, resolution)
    edge = EDGE_SLACK * min(
        h3.edge_length(e, unit="m") for e in h3.origin_to_directed_edges(cell)
    )
    k = math.ceil((radius_m + edge) / (1.5 * edge)) + 1
    if k > max_ring:
        return None
    return frozenset(h3.grid_disk(cell, k))


# ── Ranking ───────────────────────────────────────────────────────────


def _created_key(entity: Any) -> float:
    created = getattr(entity, "created_at", None)
    return created.timestamp() if created is not None else float("-inf")


def filter_and_rank(query: SearchQuery, candidates: Sequence[Locatable]) -> list[Ranked]:
    """Radius filter then sort.  Pure; no I/O."""
    assert query.center is not None
    ranked = [
        Ranked(entity=c, distance_meters=haversine_m(query.center, c.location))
        for c in candidates
    ]
    ranked = [r for r in ranked if r.distance_meters <= query.radius_meters]

    descending = query.sort_order == SortOrder.DESC
    sort_by = SortBy.parse(query.sort_by)
    if sort_by == SortBy.DISTANCE:
        ranked.sort(key=lambda r: r.distance_meters, reverse=descending)
    elif sort_by == SortBy.RATING:
        sign = -1 if descending else 1
        ranked.sort(key=lambda r: (sign * (r.entity.rating or 0.0), r.distance_meters))
    else:
        ranked.sort(key=lambda r: (_created_key(r.entity), str(r.entity.id)), reverse=descending)
    return ranked


def paginate(query: SearchQuery, ranked: Sequence[Ranked]) -> SearchResult:
    window = tuple(ranked[query.skip : query.skip + query.page_size])
    return SearchResult(
        items=window, total=len(ranked), page=query.page, page_size=query.page_size
    )


# ── Service ───────────────────────────────────────────────────────────


class NearbySearch:
    """
    Radius search over any ``CandidateSource``.

    One instance per request (the source is usually bound to a DB session);
    the cache is the shared application-wide instance.  Only the candidate
    fetch is cached: it is keyed on the rounded centre and widened by the
    rounding slack, and every call re-ranks against its own exact centre.
    """

    def __init__(
        self,
        source: CandidateSource,
        cache: "ResultCache",
        *,
        namespace: str,
        ttl_seconds: float = 300.0,
        precision: int = 4,
        h3_resolution: int = 7,
        h3_max_ring: int = 30,
    ):
        self.source = source
        self.cache = cache
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds
        self.precision = precision
        self.h3_resolution = h3_resolution
        self.h3_max_ring = h3_max_ring

    @property
    def rounding_slack_m(self) -> float:
        """Upper bound on the distance between a centre and its rounded form."""
        half_step = math.radians(0.5 * 10 ** -self.precision)
        return EARTH_RADIUS_M * half_step * math.sqrt(2)

    def rounded_center(self, center: GeoPoint) -> GeoPoint:
        return GeoPoint(
            round(center.latitude, self.precision),
            round(center.longitude, self.precision),
        )

    def cache_key(self, query: SearchQuery) -> str:
        assert query.center is not None
        rounded = self.rounded_center(query.center)
        fields = [
            rounded.latitude,
            rounded.longitude,
            float(query.radius_meters),
            query.category,
            (query.text or "").strip().lower() or None,
            sorted([k, v] for k, v in query.attributes),
        ]
        return f"{self.namespace}:{json.dumps(fields, default=str)}"

    async def search(self, query: SearchQuery) -> SearchResult:
        query.validate()
        candidates = await self.cache.get_or_compute(
            self.cache_key(query), self.ttl_seconds, lambda: self._fetch(query)
        )
        return paginate(query, filter_and_rank(query, candidates))

    async def _fetch(self, query: SearchQuery) -> tuple[Locatable, ...]:
        assert query.center is not None
        cells = covering_cells(
            self.rounded_center(query.center),
            query.radius_meters + self.rounding_slack_m,
            self.h3_resolution,
            self.h3_max_ring,
        )
        filters = CandidateFilter(
            category=query.category,
            text=query.text,
            cells=cells,
            attributes=query.attributes,
        )
        return tuple(await self.source.find_candidates(filters))
