"""
Great-circle bearing and distance between geographic coordinates.

The Earth is modelled as a sphere of radius 6,371,000 m (no ellipsoidal
correction). Bearing is undefined at zero distance and is returned as 0 there.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from transponder.angles import normalize_360
from transponder.errors import OutOfRangeCoordinate

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True)
class GeoPoint:
    """
    Latitude/longitude in signed decimal degrees.

    Out-of-range or NaN values raise OutOfRangeCoordinate; nothing is wrapped.
    """

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise OutOfRangeCoordinate(
                f"latitude {self.latitude!r} outside [-90, 90]"
            )
        if not -180.0 <= self.longitude <= 180.0:
            raise OutOfRangeCoordinate(
                f"longitude {self.longitude!r} outside [-180, 180]"
            )


@dataclass(frozen=True)
class LocationFix:
    """One location update from the location collaborator."""

    latitude: float
    longitude: float
    accuracy_m: float = 0.0
    timestamp: Optional[float] = None

    def to_point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)


@dataclass(frozen=True)
class NavigationResult:
    """Bearing in [0, 360) and distance (>= 0 m) from origin to target."""

    bearing_deg: float
    distance_m: float


def haversine_distance(origin: GeoPoint, target: GeoPoint) -> float:
    """Great-circle distance in metres."""
    phi1 = math.radians(origin.latitude)
    phi2 = math.radians(target.latitude)
    d_phi = math.radians(target.latitude - origin.latitude)
    d_lambda = math.radians(target.longitude - origin.longitude)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # rounding can push antipodal points just past 1
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def initial_bearing(origin: GeoPoint, target: GeoPoint) -> float:
    """Forward azimuth from origin to target in degrees [0, 360)."""
    phi1 = math.radians(origin.latitude)
    phi2 = math.radians(target.latitude)
    d_lambda = math.radians(target.longitude - origin.longitude)
    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(
        d_lambda
    )
    return normalize_360(math.degrees(math.atan2(y, x)))


def navigate(origin: GeoPoint, target: GeoPoint) -> NavigationResult:
    return NavigationResult(
        bearing_deg=initial_bearing(origin, target),
        distance_m=haversine_distance(origin, target),
    )


class GeodesicNavigator:
    """
    Bearing/distance from the live device position to a fixed target.

    on_location_update() replaces the current position; clear() drops it so
    that no stale result is exposed after location access is lost.
    """

    def __init__(self, target: GeoPoint) -> None:
        self.target = target
        self._position: Optional[GeoPoint] = None
        self._result: Optional[NavigationResult] = None

    def on_location_update(self, fix: LocationFix) -> NavigationResult:
        """Validate the fix and recompute. Raises OutOfRangeCoordinate."""
        position = fix.to_point()
        result = navigate(position, self.target)
        self._position = position
        self._result = result
        logger.debug(
            "Position %.6f,%.6f (+/-%.0fm): bearing=%.1f distance=%.1fm",
            position.latitude,
            position.longitude,
            fix.accuracy_m,
            result.bearing_deg,
            result.distance_m,
        )
        return result

    def clear(self) -> None:
        self._position = None
        self._result = None

    @property
    def position(self) -> Optional[GeoPoint]:
        return self._position

    @property
    def result(self) -> Optional[NavigationResult]:
        return self._result
