"""
Angle normalization and shortest-path deltas, in degrees.

Non-finite input (NaN, +/-inf) yields NaN from every function here; nothing
raises.
"""

import math

_COMPASS_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def normalize_360(angle: float) -> float:
    """Wrap angle into [0, 360)."""
    if not math.isfinite(angle):
        return math.nan
    a = angle % 360.0
    # tiny negative inputs round up to exactly 360.0
    if a >= 360.0:
        return 0.0
    return a


def shortest_delta(a: float, b: float) -> float:
    """
    Return a - b wrapped into (-180, 180].

    This is the minimal-magnitude rotation that carries heading b onto
    bearing a; an exact half turn is reported as +180.
    """
    d = normalize_360(a - b)
    if d > 180.0:
        d -= 360.0
    return d


def rotation_delta(bearing_deg: float, heading_deg: float) -> float:
    """Needle rotation toward bearing_deg when facing heading_deg."""
    return shortest_delta(bearing_deg, heading_deg)


def cardinal_point(heading_deg: float) -> str:
    """Nearest of the 8 compass points (N, NE, ... NW); empty for NaN."""
    h = normalize_360(heading_deg)
    if math.isnan(h):
        return ""
    return _COMPASS_POINTS[int((h + 22.5) // 45.0) % 8]
