"""
Unit tests for angle normalization and shortest-path deltas.
"""

import math

import pytest

from transponder.angles import (
    cardinal_point,
    normalize_360,
    rotation_delta,
    shortest_delta,
)


class TestNormalize360:
    """normalize_360 wraps any finite input into [0, 360)."""

    def test_in_range_unchanged(self) -> None:
        assert normalize_360(0.0) == 0.0
        assert normalize_360(123.5) == 123.5
        assert normalize_360(359.9) == 359.9

    def test_negative_multiple(self) -> None:
        assert normalize_360(-450) == 270.0

    def test_full_turns_map_to_zero(self) -> None:
        assert normalize_360(360) == 0.0
        assert normalize_360(720) == 0.0
        assert normalize_360(-360) == 0.0

    def test_large_negative(self) -> None:
        assert normalize_360(-36000 - 45) == pytest.approx(315.0)

    def test_tiny_negative_never_returns_360(self) -> None:
        value = normalize_360(-1e-20)
        assert 0.0 <= value < 360.0

    @pytest.mark.parametrize(
        "angle", [-1e6, -721.25, -180.0, -0.5, 0.0, 45.0, 359.999, 360.0, 1e6 + 0.25]
    )
    def test_idempotent_and_in_range(self, angle: float) -> None:
        once = normalize_360(angle)
        assert 0.0 <= once < 360.0
        assert normalize_360(once) == once


class TestNonFinite:
    """NaN and infinities pass through as NaN; nothing raises."""

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_normalize_returns_nan(self, value: float) -> None:
        assert math.isnan(normalize_360(value))

    def test_shortest_delta_returns_nan(self) -> None:
        assert math.isnan(shortest_delta(math.nan, 10.0))
        assert math.isnan(shortest_delta(10.0, math.inf))

    def test_cardinal_point_of_nan_is_empty(self) -> None:
        assert cardinal_point(math.nan) == ""


class TestShortestDelta:
    """shortest_delta returns a - b wrapped into (-180, 180]."""

    def test_wraparound_negative(self) -> None:
        assert shortest_delta(350, 10) == -20.0

    def test_wraparound_positive(self) -> None:
        assert shortest_delta(10, 350) == 20.0

    def test_zero(self) -> None:
        assert shortest_delta(90, 90) == 0.0

    def test_half_turn_is_positive_180(self) -> None:
        assert shortest_delta(180, 0) == 180.0
        assert shortest_delta(0, 180) == 180.0

    def test_unnormalized_inputs(self) -> None:
        assert shortest_delta(725, -5) == pytest.approx(10.0)

    @pytest.mark.parametrize("a", [0.0, 45.0, 179.0, 181.0, 270.0, 359.0])
    @pytest.mark.parametrize("b", [0.0, 90.0, 180.0, 300.0])
    def test_range_and_carries_b_onto_a(self, a: float, b: float) -> None:
        d = shortest_delta(a, b)
        assert -180.0 < d <= 180.0
        assert normalize_360(b + d) == pytest.approx(normalize_360(a), abs=1e-9)

    def test_rotation_delta_is_bearing_minus_heading(self) -> None:
        assert rotation_delta(10.0, 350.0) == 20.0
        assert rotation_delta(350.0, 10.0) == -20.0


class TestCardinalPoint:
    """cardinal_point maps headings to 8 compass points."""

    @pytest.mark.parametrize(
        "heading,expected",
        [
            (0.0, "N"),
            (22.4, "N"),
            (44.0, "NE"),
            (90.0, "E"),
            (135.0, "SE"),
            (180.0, "S"),
            (225.0, "SW"),
            (270.0, "W"),
            (315.0, "NW"),
            (359.0, "N"),
            (-90.0, "W"),
        ],
    )
    def test_points(self, heading: float, expected: str) -> None:
        assert cardinal_point(heading) == expected
