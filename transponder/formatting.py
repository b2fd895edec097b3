"""
Human-readable distance and coordinate strings for status output.

Halves round up (2.5m -> 3m), not to even.
"""

import math


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_distance(distance_m: float) -> str:
    """E.g. 850m, 2.3km, 42km."""
    if distance_m < 1000:
        return f"{_round_half_up(distance_m)}m"
    if distance_m < 10000:
        return f"{distance_m / 1000:.1f}km"
    return f"{_round_half_up(distance_m / 1000)}km"


def format_coordinate(value: float, is_longitude: bool = False) -> str:
    """E.g. 37.7749°N or 122.4194°W."""
    if is_longitude:
        hem = "E" if value >= 0 else "W"
    else:
        hem = "N" if value >= 0 else "S"
    return f"{abs(value):.4f}°{hem}"
