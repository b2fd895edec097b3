"""
Tilt-compensated compass heading from accelerometer + magnetometer samples.

Axes are device-body: +X right, +Y up, +Z out of the screen. Accelerometer
in g, magnetometer in microtesla (uT); only ratios matter, so any consistent
unit works.

Free-fall (az == 0 with ay == 0, or az == 0 with ax == 0) gives a pitch or
roll of 0 by the atan2(0, 0) convention. That reading is meaningless but it is
returned as-is rather than special-cased.

No smoothing is applied: every estimate is a pure function of the latest pair
of samples, so output follows sensor noise.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from transponder.angles import normalize_360

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SensorSample:
    """One accelerometer or magnetometer reading (x, y, z)."""

    x: float
    y: float
    z: float

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "SensorSample":
        """Build from the first three items of a list/tuple."""
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Orientation:
    """Derived device orientation in degrees."""

    pitch: float
    roll: float
    heading: float  # tilt-compensated, [0, 360)
    raw_heading: float  # magnetometer only, [0, 360)


def tilt_angles(accel: SensorSample) -> Tuple[float, float]:
    """Return (pitch, roll) in degrees from the gravity vector."""
    pitch = math.atan2(accel.y, accel.z)
    roll = math.atan2(accel.x, accel.z)
    return (math.degrees(pitch), math.degrees(roll))


def uncompensated_heading(mag: SensorSample) -> float:
    """Heading in [0, 360) assuming the device lies flat; ignores mag.z."""
    return normalize_360(math.degrees(math.atan2(-mag.x, mag.y)))


def compensated_heading(accel: SensorSample, mag: SensorSample) -> float:
    """Heading in [0, 360) with the magnetometer rotated into the horizontal plane."""
    pitch = math.atan2(accel.y, accel.z)
    roll = math.atan2(accel.x, accel.z)
    sin_pitch, cos_pitch = math.sin(pitch), math.cos(pitch)
    sin_roll, cos_roll = math.sin(roll), math.cos(roll)
    mag_x = mag.x * cos_pitch + mag.z * sin_pitch
    mag_y = (
        mag.x * sin_roll * sin_pitch
        + mag.y * cos_roll
        - mag.z * sin_roll * cos_pitch
    )
    return normalize_360(math.degrees(math.atan2(-mag_x, mag_y)))


def estimate(accel: SensorSample, mag: SensorSample) -> Orientation:
    """Full orientation for one accelerometer/magnetometer pair."""
    pitch, roll = tilt_angles(accel)
    return Orientation(
        pitch=pitch,
        roll=roll,
        heading=compensated_heading(accel, mag),
        raw_heading=uncompensated_heading(mag),
    )


class OrientationEstimator:
    """
    Holds the latest accelerometer and magnetometer sample.

    Each new sample triggers a fresh estimate against the latest sample of
    the other kind, however old it is; the two streams need not be delivered
    together. Returns None until both kinds have been seen.
    """

    def __init__(self) -> None:
        self._accel: Optional[SensorSample] = None
        self._mag: Optional[SensorSample] = None

    def on_accelerometer_sample(self, sample: SensorSample) -> Optional[Orientation]:
        self._accel = sample
        return self.current()

    def on_magnetometer_sample(self, sample: SensorSample) -> Optional[Orientation]:
        self._mag = sample
        return self.current()

    def current(self) -> Optional[Orientation]:
        """Estimate from the latest pair, or None if one kind is missing."""
        if self._accel is None or self._mag is None:
            return None
        return estimate(self._accel, self._mag)

    @property
    def has_accelerometer(self) -> bool:
        return self._accel is not None

    def reset(self) -> None:
        """Forget both samples (e.g. after unsubscribing)."""
        logger.debug("Orientation samples cleared")
        self._accel = None
        self._mag = None
