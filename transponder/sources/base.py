"""
Abstract interfaces for motion, location and device-heading sources.
"""

from typing import Optional, Tuple

from transponder.geodesy import LocationFix
from transponder.heading_source import HeadingEvent
from transponder.orientation import SensorSample

# (accelerometer in g, magnetometer in uT); either may be None
MotionSample = Tuple[Optional[SensorSample], Optional[SensorSample]]


class MotionSource:
    """Source of accelerometer and magnetometer samples."""

    magnetometer_available: bool = True

    def read(self) -> MotionSample:
        """
        Return the latest (accel, magnetometer) without blocking.

        A None entry means no sample of that kind is available.
        """
        raise NotImplementedError


class LocationSource:
    """Source of device position."""

    def get_fix(self) -> Optional[LocationFix]:
        """Return current fix or None if unavailable."""
        raise NotImplementedError

    def access_error(self) -> Optional[str]:
        """
        "permission_denied" or "services_disabled" when location cannot be
        used, else None.
        """
        return None


class HeadingEventSource:
    """Source of device-reported (true, magnetic) heading events."""

    def poll_event(self) -> Optional[HeadingEvent]:
        """Return the next unconsumed event, or None."""
        raise NotImplementedError

    def failure(self) -> Optional[str]:
        """Reason the source failed to start or stopped, else None."""
        return None

    def connected_at(self) -> Optional[float]:
        """
        Monotonic time the source first became able to deliver events, or
        None while it is still waiting (e.g. for a client to connect).
        """
        return None

    def stop(self) -> None:
        """Unsubscribe; no further events are delivered."""
