"""
Typed failures surfaced to callers for user-facing messaging.

Degenerate numeric input (zero-magnitude vectors, coincident points) is not an
error; see orientation and geodesy for the zero-output convention.
"""


class TransponderError(Exception):
    """Base class for transponder errors."""


class OutOfRangeCoordinate(TransponderError, ValueError):
    """Latitude or longitude outside valid bounds (or not a number)."""


class SensorUnavailable(TransponderError):
    """No heading source is obtainable; heading is not authoritative."""


class LocationAccessError(TransponderError):
    """Location cannot be used; no navigation result is exposed."""


class ServicesDisabled(LocationAccessError):
    """Device location services are switched off."""


class PermissionDenied(LocationAccessError):
    """Location permission was not granted."""
