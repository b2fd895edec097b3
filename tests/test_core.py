"""
Unit tests for the Transponder facade: event wiring, rotation delta, typed failures.
"""

import pytest

from transponder.core import IndicatorState, Transponder, check_location_access
from transponder.errors import (
    LocationAccessError,
    OutOfRangeCoordinate,
    PermissionDenied,
    SensorUnavailable,
    ServicesDisabled,
)
from transponder.geodesy import GeoPoint, LocationFix
from transponder.heading_source import HeadingEvent, SelectorState, SourceKind
from transponder.orientation import SensorSample

# target 0.01 deg due north of the start position
TARGET = GeoPoint(37.7849, -122.4194)
START = LocationFix(37.7749, -122.4194, accuracy_m=8.0)


def make_transponder(magnetometer_available: bool = True) -> Transponder:
    return Transponder(
        TARGET, magnetometer_available=magnetometer_available, clock=lambda: 1.0
    )


class TestCheckLocationAccess:
    """Services are checked before permission."""

    def test_ok(self) -> None:
        check_location_access(True, True)

    def test_services_disabled_first(self) -> None:
        with pytest.raises(ServicesDisabled):
            check_location_access(False, False)

    def test_permission_denied(self) -> None:
        with pytest.raises(PermissionDenied) as exc_info:
            check_location_access(True, False)
        assert isinstance(exc_info.value, LocationAccessError)


class TestIndicatorState:
    """Derived values per event."""

    def test_initial_state(self) -> None:
        state = make_transponder().state()
        assert isinstance(state, IndicatorState)
        assert state.navigation is None
        assert state.rotation_delta is None
        assert state.orientation is None
        assert state.heading.authoritative is False

    def test_rotation_delta_from_heading_and_bearing(self) -> None:
        t = make_transponder()
        t.on_location_update(START)
        state = t.on_heading_event(HeadingEvent.from_sentinels(350.0, -1))
        assert state.navigation is not None
        assert state.navigation.bearing_deg == pytest.approx(0.0, abs=1e-9)
        assert state.rotation_delta == pytest.approx(10.0)

    def test_rotation_delta_negative(self) -> None:
        t = make_transponder()
        t.on_heading_event(HeadingEvent.from_sentinels(-1, 20.0))
        state = t.on_location_update(START)
        assert state.rotation_delta == pytest.approx(-20.0)

    def test_orientation_from_samples(self) -> None:
        t = make_transponder()
        t.on_accelerometer_sample(SensorSample(0.0, 0.0, 1.0))
        state = t.on_magnetometer_sample(SensorSample(-30.0, 0.0, 5.0))
        assert state.orientation is not None
        assert state.orientation.heading == pytest.approx(90.0)

    def test_magnetometer_fallback_drives_delta(self) -> None:
        t = make_transponder()
        t.on_location_update(START)
        t.on_heading_source_error("not supported")
        state = t.on_magnetometer_sample(SensorSample(-30.0, 0.0, 0.0))
        assert state.heading.source is SourceKind.MAGNETOMETER_DERIVED
        assert state.heading.authoritative is True
        assert state.rotation_delta == pytest.approx(-90.0)

    def test_invalid_fix_raises(self) -> None:
        t = make_transponder()
        with pytest.raises(OutOfRangeCoordinate):
            t.on_location_update(LocationFix(95.0, 0.0))
        assert t.state().navigation is None

    def test_to_dict(self) -> None:
        t = make_transponder()
        t.on_location_update(START)
        t.on_accelerometer_sample(SensorSample(0.0, 0.0, 1.0))
        t.on_magnetometer_sample(SensorSample(0.0, 30.0, 0.0))
        data = t.on_heading_event(HeadingEvent.from_sentinels(90.0, -1)).to_dict()
        assert data["heading"] == 90.0
        assert data["heading_source"] == "true_heading"
        assert data["authoritative"] is True
        assert data["bearing"] == pytest.approx(0.0, abs=1e-9)
        assert data["distance_m"] == pytest.approx(1112, abs=5)
        assert data["rotation_delta"] == pytest.approx(-90.0)
        assert data["location_error"] is None
        assert data["pitch"] == 0.0
        assert data["raw_heading"] == 0.0

    def test_to_dict_without_navigation(self) -> None:
        data = make_transponder().state().to_dict()
        assert data["bearing"] is None
        assert data["distance_m"] is None
        assert "pitch" not in data


class TestLocationErrors:
    """Location failures hide navigation instead of exposing a stale result."""

    def test_location_error_clears_navigation(self) -> None:
        t = make_transponder()
        t.on_location_update(START)
        state = t.on_location_error(PermissionDenied("Location permission denied"))
        assert state.navigation is None
        assert state.rotation_delta is None
        assert state.location_error == "Location permission denied"
        assert isinstance(t.location_error, PermissionDenied)

    def test_new_fix_clears_error(self) -> None:
        t = make_transponder()
        t.on_location_error(ServicesDisabled("off"))
        state = t.on_location_update(START)
        assert state.location_error is None
        assert t.location_error is None
        assert state.navigation is not None


class TestRequireHeading:
    """SensorUnavailable only when no heading source is obtainable."""

    def test_uninitialized_is_not_an_error(self) -> None:
        reading = make_transponder().require_heading()
        assert reading.authoritative is False

    def test_unavailable_raises(self) -> None:
        t = make_transponder(magnetometer_available=False)
        t.on_heading_event(HeadingEvent.from_sentinels(-1, -1))
        assert t.selector.state is SelectorState.UNAVAILABLE
        with pytest.raises(SensorUnavailable):
            t.require_heading()

    def test_magnetometer_unavailable_event(self) -> None:
        t = make_transponder()
        t.on_heading_source_error()
        t.on_magnetometer_unavailable()
        with pytest.raises(SensorUnavailable):
            t.require_heading()


class TestReset:
    """reset() re-initializes every component."""

    def test_reset(self) -> None:
        t = make_transponder()
        t.on_location_update(START)
        t.on_heading_source_error()
        t.on_location_error(PermissionDenied("no"))
        t.reset()
        state = t.state()
        assert t.selector.state is SelectorState.UNINITIALIZED
        assert state.navigation is None
        assert state.location_error is None
        assert t.estimator.current() is None
