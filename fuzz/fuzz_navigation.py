#!/usr/bin/env python3
"""
LibFuzzer harness for angle wrapping and great-circle navigation.

Consumes doubles from the input and checks the output ranges of
normalize_360, shortest_delta and navigate.
Run: python fuzz/fuzz_navigation.py fuzz/corpus/navigation/ [options]
"""

import math
import sys

try:
    import atheris
except ImportError:
    print("Install atheris: pip install atheris")
    sys.exit(1)

with atheris.instrument_imports():
    from transponder.angles import normalize_360, shortest_delta
    from transponder.errors import OutOfRangeCoordinate
    from transponder.geodesy import EARTH_RADIUS_M, GeoPoint, navigate


def test_one_input(data: bytes) -> None:
    fdp = atheris.FuzzedDataProvider(data)
    a = fdp.ConsumeRegularFloat()
    b = fdp.ConsumeRegularFloat()

    n = normalize_360(a)
    assert 0.0 <= n < 360.0
    if math.isfinite(a - b):
        d = shortest_delta(a, b)
        assert -180.0 < d <= 180.0

    try:
        origin = GeoPoint(fdp.ConsumeFloat(), fdp.ConsumeFloat())
        target = GeoPoint(fdp.ConsumeFloat(), fdp.ConsumeFloat())
    except OutOfRangeCoordinate:
        return
    result = navigate(origin, target)
    assert 0.0 <= result.bearing_deg < 360.0
    assert 0.0 <= result.distance_m <= math.pi * EARTH_RADIUS_M + 1.0


def main() -> None:
    atheris.Setup(sys.argv, test_one_input)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
