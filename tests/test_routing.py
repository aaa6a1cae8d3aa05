"""Unit tests for route synthesis: local estimate, provider path and fallbacks."""

import asyncio
import math
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from tourgeo.domain import polyline
from tourgeo.domain.entities import GeoPoint, RouteLeg, Waypoint
from tourgeo.domain.enums import Difficulty, TransportMode
from tourgeo.domain.errors import ProviderUnavailable
from tourgeo.domain.routing import (
    Directions,
    RoutePolicy,
    RouteSynthesizer,
    round_half_up,
)

START = GeoPoint(47.2357, 39.7125)


def along_meridian(*meters: float) -> list[Waypoint]:
    """Waypoints due north of START at the given cumulative distances."""
    return [
        Waypoint(
            location=GeoPoint(START.latitude + math.degrees(m / 6_371_000.0), START.longitude),
            id=str(i),
        )
        for i, m in enumerate(meters)
    ]


class TestRoundHalfUp:
    def test_half_goes_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_below_half_goes_down(self):
        assert round_half_up(2.49) == 2


class TestRoutePolicy:
    @pytest.mark.parametrize(
        "km, expected",
        [
            (0.0, Difficulty.EASY),
            (4.99, Difficulty.EASY),
            (5.0, Difficulty.MEDIUM),
            (9.99, Difficulty.MEDIUM),
            (10.0, Difficulty.HARD),
            (42.0, Difficulty.HARD),
        ],
    )
    def test_classify(self, km, expected):
        assert RoutePolicy().classify(km) is expected

    def test_walking_uses_difficulty_speed(self):
        policy = RoutePolicy()
        assert policy.speed_for(TransportMode.WALKING, Difficulty.EASY) == 4.0
        assert policy.speed_for(TransportMode.WALKING, Difficulty.HARD) == 6.0

    def test_other_modes_use_mode_speed(self):
        policy = RoutePolicy()
        assert policy.speed_for(TransportMode.DRIVING, Difficulty.EASY) == 50.0
        assert policy.speed_for(TransportMode.BICYCLING, Difficulty.HARD) == 15.0

    def test_from_settings_overrides_defaults(self):
        settings = SimpleNamespace(
            difficulty_speeds_kmh={"medium": 3.0},
            mode_speeds_kmh={"driving": 30.0},
            medium_from_km=2.0,
            hard_from_km=4.0,
        )
        policy = RoutePolicy.from_settings(settings)
        assert policy.speed_for(TransportMode.WALKING, Difficulty.MEDIUM) == 3.0
        assert policy.speed_for(TransportMode.WALKING, Difficulty.EASY) == 4.0
        assert policy.speed_for(TransportMode.DRIVING, Difficulty.EASY) == 30.0
        assert policy.classify(3.0) is Difficulty.MEDIUM


class TestLocalEstimate:
    @pytest.mark.asyncio
    async def test_no_waypoints(self):
        route = await RouteSynthesizer().build_route([])
        assert route.total_distance_meters == 0
        assert route.estimated_time_minutes == 0
        assert route.encoded_path is None

    @pytest.mark.asyncio
    async def test_single_waypoint(self):
        route = await RouteSynthesizer().build_route(along_meridian(0))
        assert route.total_distance_meters == 0
        assert route.estimated_time_minutes == 0
        assert route.encoded_path is None
        assert len(route.waypoints) == 1

    @pytest.mark.asyncio
    async def test_three_km_at_medium_takes_36_minutes(self):
        waypoints = along_meridian(0, 1500, 3000)
        route = await RouteSynthesizer().build_route(waypoints, difficulty=Difficulty.MEDIUM)
        assert route.total_distance_meters == pytest.approx(3000, abs=0.01)
        assert route.estimated_time_minutes == 36
        assert route.difficulty is Difficulty.MEDIUM
        assert route.source == "estimate"

    @pytest.mark.asyncio
    async def test_difficulty_classified_when_omitted(self):
        route = await RouteSynthesizer().build_route(along_meridian(0, 6000))
        assert route.difficulty is Difficulty.MEDIUM
        # 6 km at 5 km/h
        assert route.estimated_time_minutes == 72

    @pytest.mark.asyncio
    async def test_waypoint_order_preserved(self):
        waypoints = along_meridian(0, 3000, 1000)
        route = await RouteSynthesizer().build_route(waypoints)
        assert [w.id for w in route.waypoints] == ["0", "1", "2"]
        # 3 km out, 2 km back
        assert route.total_distance_meters == pytest.approx(5000, abs=0.01)

    @pytest.mark.asyncio
    async def test_encoded_path_follows_waypoints(self):
        waypoints = along_meridian(0, 1000, 2000)
        route = await RouteSynthesizer().build_route(waypoints)
        decoded = polyline.decode(route.encoded_path)
        assert len(decoded) == 3
        for got, w in zip(decoded, waypoints):
            assert got.latitude == pytest.approx(w.location.latitude, abs=1e-5)

    @pytest.mark.asyncio
    async def test_legs_sum_to_total(self):
        route = await RouteSynthesizer().build_route(along_meridian(0, 700, 2500))
        assert len(route.legs) == 2
        assert sum(l.distance_meters for l in route.legs) == pytest.approx(
            route.total_distance_meters
        )

    @pytest.mark.asyncio
    async def test_driving_uses_mode_speed(self):
        route = await RouteSynthesizer().build_route(
            along_meridian(0, 12_000), transport_mode=TransportMode.DRIVING
        )
        # 12 km at 50 km/h = 14.4 min
        assert route.estimated_time_minutes == 14
        assert route.difficulty is Difficulty.HARD


class TestProviderPath:
    @pytest.mark.asyncio
    async def test_provider_numbers_taken_verbatim(self):
        encoded = polyline.encode([START, GeoPoint(47.25, 39.73)])
        provider = AsyncMock()
        provider.get_directions.return_value = Directions(
            distance_meters=4321.0,
            duration_seconds=1230.0,
            encoded_path=encoded,
            legs=(RouteLeg(4321.0, 1230.0),),
        )
        route = await RouteSynthesizer(provider=provider).build_route(along_meridian(0, 1000))

        assert route.source == "provider"
        assert route.total_distance_meters == 4321.0
        assert route.estimated_time_minutes == 21  # 20.5 rounds up
        assert route.encoded_path == encoded
        assert route.legs == (RouteLeg(4321.0, 1230.0),)

    @pytest.mark.asyncio
    async def test_provider_gets_ordered_stops(self):
        provider = AsyncMock()
        provider.get_directions.return_value = Directions(1.0, 1.0)
        waypoints = along_meridian(0, 1000, 2000, 3000)
        await RouteSynthesizer(provider=provider).build_route(
            waypoints, transport_mode=TransportMode.BICYCLING
        )
        origin, destination, middle, mode = provider.get_directions.await_args.args
        assert origin == waypoints[0].location
        assert destination == waypoints[-1].location
        assert list(middle) == [waypoints[1].location, waypoints[2].location]
        assert mode is TransportMode.BICYCLING

    @pytest.mark.asyncio
    async def test_timeout_falls_back_to_estimate(self):
        class SlowProvider:
            async def get_directions(self, *args):
                await asyncio.sleep(10)

        synthesizer = RouteSynthesizer(provider=SlowProvider(), timeout_seconds=0.01)
        route = await synthesizer.build_route(along_meridian(0, 1500, 3000), difficulty="medium")

        assert route.source == "estimate"
        assert route.encoded_path
        assert route.estimated_time_minutes == 36

    @pytest.mark.asyncio
    async def test_unavailable_provider_falls_back_to_estimate(self):
        provider = AsyncMock()
        provider.get_directions.side_effect = ProviderUnavailable("503 from upstream")
        route = await RouteSynthesizer(provider=provider).build_route(along_meridian(0, 2000))
        assert route.source == "estimate"
        assert route.total_distance_meters == pytest.approx(2000, abs=0.01)

    @pytest.mark.asyncio
    async def test_negative_provider_distance_is_treated_as_unavailable(self):
        provider = AsyncMock()
        provider.get_directions.return_value = Directions(-5.0, 60.0)
        route = await RouteSynthesizer(provider=provider).build_route(along_meridian(0, 2000))
        assert route.source == "estimate"

    @pytest.mark.asyncio
    async def test_corrupt_polyline_keeps_numbers_and_rebuilds_path(self):
        provider = AsyncMock()
        provider.get_directions.return_value = Directions(
            distance_meters=2500.0, duration_seconds=600.0, encoded_path="_p~iF~ps|U_"
        )
        waypoints = along_meridian(0, 2000)
        route = await RouteSynthesizer(provider=provider).build_route(waypoints)

        assert route.source == "provider"
        assert route.total_distance_meters == 2500.0
        assert route.estimated_time_minutes == 10
        assert route.encoded_path == polyline.encode([w.location for w in waypoints])

    @pytest.mark.asyncio
    async def test_unexpected_provider_error_falls_back_to_estimate(self):
        provider = AsyncMock()
        provider.get_directions.side_effect = KeyError("bug")
        route = await RouteSynthesizer(provider=provider).build_route(along_meridian(0, 2000))
        assert route.source == "estimate"
        assert route.total_distance_meters == pytest.approx(2000, abs=0.01)

    @pytest.mark.asyncio
    async def test_provider_not_called_for_single_waypoint(self):
        provider = AsyncMock()
        await RouteSynthesizer(provider=provider).build_route(along_meridian(0))
        provider.get_directions.assert_not_called()
