"""
Unit tests for GeoPoint validation, Haversine distance, bearing and the navigator.
"""

import math

import pytest

from transponder.errors import OutOfRangeCoordinate
from transponder.geodesy import (
    EARTH_RADIUS_M,
    GeodesicNavigator,
    GeoPoint,
    LocationFix,
    NavigationResult,
    haversine_distance,
    initial_bearing,
    navigate,
)

SAN_FRANCISCO = GeoPoint(37.7749, -122.4194)


class TestGeoPointValidation:
    """Coordinates are checked, never wrapped."""

    @pytest.mark.parametrize(
        "lat,lon", [(90.0, 180.0), (-90.0, -180.0), (0.0, 0.0), (51.5, -0.12)]
    )
    def test_valid_bounds_inclusive(self, lat: float, lon: float) -> None:
        point = GeoPoint(lat, lon)
        assert point.latitude == lat
        assert point.longitude == lon

    @pytest.mark.parametrize(
        "lat,lon",
        [
            (90.0001, 0.0),
            (-91.0, 0.0),
            (0.0, 180.5),
            (0.0, -200.0),
            (math.nan, 0.0),
            (0.0, math.nan),
            (math.inf, 0.0),
        ],
    )
    def test_out_of_range_rejected(self, lat: float, lon: float) -> None:
        with pytest.raises(OutOfRangeCoordinate):
            GeoPoint(lat, lon)

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            GeoPoint(100.0, 0.0)


class TestKnownScenarios:
    """Reference distances and bearings on the R=6,371,000 m sphere."""

    def test_quarter_circumference_due_east(self) -> None:
        origin = GeoPoint(0.0, 0.0)
        target = GeoPoint(0.0, 90.0)
        assert initial_bearing(origin, target) == pytest.approx(90.0)
        assert haversine_distance(origin, target) == pytest.approx(10_007_543, abs=1)

    def test_san_francisco_due_north(self) -> None:
        target = GeoPoint(37.7849, -122.4194)
        assert initial_bearing(SAN_FRANCISCO, target) == pytest.approx(0.0, abs=1e-9)
        assert haversine_distance(SAN_FRANCISCO, target) == pytest.approx(1112, abs=5)

    def test_due_south_and_west(self) -> None:
        origin = GeoPoint(10.0, 10.0)
        assert initial_bearing(origin, GeoPoint(0.0, 10.0)) == pytest.approx(180.0)
        assert initial_bearing(GeoPoint(0.0, 10.0), GeoPoint(0.0, 0.0)) == (
            pytest.approx(270.0)
        )

    def test_bearing_always_normalized(self) -> None:
        bearing = initial_bearing(GeoPoint(0.0, 0.0), GeoPoint(-10.0, -10.0))
        assert 180.0 < bearing < 270.0


class TestEdgeCases:
    """Zero distance, antipodes, symmetry."""

    def test_same_point(self) -> None:
        assert haversine_distance(SAN_FRANCISCO, SAN_FRANCISCO) == 0.0
        assert initial_bearing(SAN_FRANCISCO, SAN_FRANCISCO) == 0.0

    def test_antipodal_points_do_not_error(self) -> None:
        d = haversine_distance(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0))
        assert d == pytest.approx(math.pi * EARTH_RADIUS_M, rel=1e-9)
        b = initial_bearing(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0))
        assert 0.0 <= b < 360.0

    def test_pole_to_pole(self) -> None:
        d = haversine_distance(GeoPoint(90.0, 0.0), GeoPoint(-90.0, 0.0))
        assert d == pytest.approx(math.pi * EARTH_RADIUS_M, rel=1e-9)

    @pytest.mark.parametrize(
        "a,b",
        [
            ((37.7749, -122.4194), (40.7128, -74.0060)),
            ((-33.8688, 151.2093), (51.5074, -0.1278)),
            ((89.9, 0.0), (-89.9, 179.9)),
            ((0.0, -180.0), (0.0, 180.0)),
        ],
    )
    def test_distance_symmetric(self, a: tuple, b: tuple) -> None:
        p, q = GeoPoint(*a), GeoPoint(*b)
        assert haversine_distance(p, q) == pytest.approx(
            haversine_distance(q, p), rel=1e-12, abs=1e-6
        )
        assert haversine_distance(p, q) >= 0.0

    def test_navigate_bundles_both(self) -> None:
        result = navigate(GeoPoint(0.0, 0.0), GeoPoint(0.0, 90.0))
        assert isinstance(result, NavigationResult)
        assert result.bearing_deg == pytest.approx(90.0)
        assert result.distance_m == pytest.approx(10_007_543, abs=1)


class TestGeodesicNavigator:
    """Navigator holds the live position against a fixed target."""

    def test_no_result_before_first_fix(self) -> None:
        nav = GeodesicNavigator(SAN_FRANCISCO)
        assert nav.position is None
        assert nav.result is None

    def test_location_update(self) -> None:
        nav = GeodesicNavigator(GeoPoint(37.7849, -122.4194))
        result = nav.on_location_update(LocationFix(37.7749, -122.4194, accuracy_m=5.0))
        assert result.bearing_deg == pytest.approx(0.0, abs=1e-9)
        assert result.distance_m == pytest.approx(1112, abs=5)
        assert nav.position == SAN_FRANCISCO
        assert nav.result == result

    def test_invalid_fix_rejected_and_previous_kept(self) -> None:
        nav = GeodesicNavigator(SAN_FRANCISCO)
        first = nav.on_location_update(LocationFix(37.0, -122.0))
        with pytest.raises(OutOfRangeCoordinate):
            nav.on_location_update(LocationFix(137.0, -122.0))
        assert nav.result == first

    def test_clear(self) -> None:
        nav = GeodesicNavigator(SAN_FRANCISCO)
        nav.on_location_update(LocationFix(37.0, -122.0))
        nav.clear()
        assert nav.position is None
        assert nav.result is None
