"""
Event-driven facade over the orientation, geodesy and heading-source layers.

Collaborators deliver discrete events (sensor samples, location fixes,
device heading events, errors); each handler returns the freshly derived
IndicatorState and touches no global or UI state. Not thread-safe: callers
invoke it from a single event loop.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from transponder.angles import rotation_delta
from transponder.errors import (
    LocationAccessError,
    PermissionDenied,
    SensorUnavailable,
    ServicesDisabled,
)
from transponder.geodesy import (
    GeodesicNavigator,
    GeoPoint,
    LocationFix,
    NavigationResult,
)
from transponder.heading_source import (
    HeadingEvent,
    HeadingReading,
    HeadingSourceSelector,
    SelectorState,
)
from transponder.orientation import Orientation, OrientationEstimator, SensorSample

logger = logging.getLogger(__name__)


def check_location_access(services_enabled: bool, permission_granted: bool) -> None:
    """Raise ServicesDisabled or PermissionDenied (in that order) if location is unusable."""
    if not services_enabled:
        raise ServicesDisabled("Location services are disabled")
    if not permission_granted:
        raise PermissionDenied("Location permission denied")


@dataclass(frozen=True)
class IndicatorState:
    """Everything the presentation layer needs for one frame."""

    heading: HeadingReading
    orientation: Optional[Orientation] = None
    navigation: Optional[NavigationResult] = None
    rotation_delta: Optional[float] = None
    location_error: Optional[str] = None

    def to_dict(self) -> dict:
        """JSON-suitable dict."""
        data: dict = {
            "heading": self.heading.degrees,
            "heading_source": self.heading.source.value,
            "authoritative": self.heading.authoritative,
            "bearing": None,
            "distance_m": None,
            "rotation_delta": self.rotation_delta,
            "location_error": self.location_error,
        }
        if self.navigation is not None:
            data["bearing"] = self.navigation.bearing_deg
            data["distance_m"] = self.navigation.distance_m
        if self.orientation is not None:
            data["pitch"] = self.orientation.pitch
            data["roll"] = self.orientation.roll
            data["compensated_heading"] = self.orientation.heading
            data["raw_heading"] = self.orientation.raw_heading
        return data


class Transponder:
    """
    Points toward a fixed target.

    Owns one OrientationEstimator, one GeodesicNavigator and one
    HeadingSourceSelector and wires events between them.
    """

    def __init__(
        self,
        target: GeoPoint,
        magnetometer_available: bool = True,
        primary_rate_hz: float = 10.0,
        fallback_rate_hz: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.estimator = OrientationEstimator()
        self.navigator = GeodesicNavigator(target)
        self.selector = HeadingSourceSelector(
            magnetometer_available=magnetometer_available,
            primary_rate_hz=primary_rate_hz,
            fallback_rate_hz=fallback_rate_hz,
            clock=clock,
        )
        self._orientation: Optional[Orientation] = None
        self._location_error: Optional[LocationAccessError] = None

    def on_accelerometer_sample(self, sample: SensorSample) -> IndicatorState:
        self._orientation = self.estimator.on_accelerometer_sample(sample)
        return self.state()

    def on_magnetometer_sample(self, sample: SensorSample) -> IndicatorState:
        self._orientation = self.estimator.on_magnetometer_sample(sample)
        self.selector.on_magnetometer_sample(sample)
        return self.state()

    def on_heading_event(self, event: HeadingEvent) -> IndicatorState:
        self.selector.on_heading_event(event)
        return self.state()

    def on_heading_source_error(self, reason: str = "") -> IndicatorState:
        self.selector.on_heading_source_error(reason)
        return self.state()

    def on_magnetometer_unavailable(self) -> IndicatorState:
        self.selector.on_magnetometer_unavailable()
        return self.state()

    def on_location_update(self, fix: LocationFix) -> IndicatorState:
        """New device position. Raises OutOfRangeCoordinate for invalid fixes."""
        self.navigator.on_location_update(fix)
        self._location_error = None
        return self.state()

    def on_location_error(self, error: LocationAccessError) -> IndicatorState:
        """Location became unusable; drop any navigation result."""
        logger.error("Location unavailable: %s", error)
        self._location_error = error
        self.navigator.clear()
        return self.state()

    @property
    def location_error(self) -> Optional[LocationAccessError]:
        return self._location_error

    def require_heading(self) -> HeadingReading:
        """Current heading; raises SensorUnavailable when no source is obtainable."""
        if self.selector.state is SelectorState.UNAVAILABLE:
            raise SensorUnavailable("No heading source available")
        return self.selector.current_heading()

    def state(self) -> IndicatorState:
        heading = self.selector.current_heading()
        navigation = self.navigator.result
        delta = None
        if navigation is not None:
            delta = rotation_delta(navigation.bearing_deg, heading.degrees)
        return IndicatorState(
            heading=heading,
            orientation=self._orientation,
            navigation=navigation,
            rotation_delta=delta,
            location_error=str(self._location_error) if self._location_error else None,
        )

    def reset(self) -> None:
        """Explicit re-initialization (e.g. screen re-entry)."""
        self.estimator.reset()
        self.navigator.clear()
        self.selector.reset()
        self._orientation = None
        self._location_error = None
