"""
Read accelerometer and magnetometer from Linux IIO sysfs.

Discovers IIO devices under /sys/bus/iio/devices/ and reads raw channels
with scale/offset. IIO reports acceleration in m/s^2 and magnetic field in
gauss; samples are returned in g and microtesla (uT).
"""

import logging
from pathlib import Path
from typing import List, Optional

from transponder.orientation import SensorSample

logger = logging.getLogger(__name__)

IIO_BASE = Path("/sys/bus/iio/devices")

STANDARD_GRAVITY = 9.80665
GAUSS_TO_MICROTESLA = 100.0


def _read_one(path: Path, default: float = 0.0) -> float:
    """Read a single value from sysfs; return default on error."""
    try:
        return float(path.read_text().strip())
    except (OSError, ValueError):
        return default


def _has_channels(device_path: Path, prefix: str) -> bool:
    """Return True if device has x,y,z raw and scale for the given prefix."""
    for axis in ("x", "y", "z"):
        if not (device_path / f"{prefix}_{axis}_raw").exists():
            return False
    return (device_path / f"{prefix}_scale").exists()


def discover_iio_devices() -> List[Path]:
    """Return list of IIO device sysfs paths (e.g. .../iio:device0)."""
    if not IIO_BASE.exists():
        return []
    devices = []
    for path in IIO_BASE.iterdir():
        if path.is_dir() and path.name.startswith("iio:device"):
            devices.append(path)
    return sorted(devices, key=lambda p: p.name)


def _find_device(
    prefix: str,
    explicit: Optional[str],
    preferred: Optional[Path] = None,
) -> Optional[Path]:
    if explicit:
        p = Path(explicit)
        if p.exists() and _has_channels(p, prefix):
            return p
        logger.warning("IIO path %s missing %s channels", explicit, prefix)
    if preferred and _has_channels(preferred, prefix):
        return preferred
    for dev in discover_iio_devices():
        if _has_channels(dev, prefix):
            return dev
    return None


def find_accel_device(accel_path: Optional[str] = None) -> Optional[Path]:
    """
    Return IIO sysfs path for accelerometer.

    If accel_path is set, use it if it exists and has accel channels.
    Otherwise search for first device with in_accel_* channels.
    """
    return _find_device("in_accel", accel_path)


def find_magnetometer_device(
    magnetometer_path: Optional[str] = None,
    accel_path: Optional[Path] = None,
) -> Optional[Path]:
    """
    Return IIO sysfs path for magnetometer.

    Prefers the accelerometer's device (9-axis chips) before searching others.
    """
    return _find_device("in_magn", magnetometer_path, accel_path)


class _Channel:
    """Scale and per-axis offset of one x/y/z channel group."""

    def __init__(self, device: Path, prefix: str, unit_factor: float) -> None:
        self.device = device
        self.prefix = prefix
        self.unit_factor = unit_factor
        self.scale = _read_one(device / f"{prefix}_scale", 1.0)
        self.offset = [
            _read_one(device / f"{prefix}_{axis}_offset", 0.0)
            for axis in ("x", "y", "z")
        ]
        logger.debug("%s scale=%s offset=%s", prefix, self.scale, self.offset)

    def read(self) -> SensorSample:
        values = []
        for i, axis in enumerate(("x", "y", "z")):
            raw = _read_one(self.device / f"{self.prefix}_{axis}_raw")
            values.append((raw + self.offset[i]) * self.scale * self.unit_factor)
        return SensorSample(values[0], values[1], values[2])


class IIOReader:
    """
    Read accelerometer and optionally magnetometer from IIO sysfs.

    Units: accelerometer g, magnetometer microtesla (uT).
    """

    def __init__(
        self,
        accel_path: Optional[Path] = None,
        magnetometer_path: Optional[Path] = None,
    ) -> None:
        self.accel_path = accel_path
        self.magnetometer_path = magnetometer_path
        self._accel = (
            _Channel(accel_path, "in_accel", 1.0 / STANDARD_GRAVITY)
            if accel_path
            else None
        )
        self._magnetometer = (
            _Channel(magnetometer_path, "in_magn", GAUSS_TO_MICROTESLA)
            if magnetometer_path
            else None
        )

    def read_accel(self) -> Optional[SensorSample]:
        """Accelerometer in g, or None without a device."""
        if self._accel is None:
            return None
        return self._accel.read()

    def read_magnetometer(self) -> Optional[SensorSample]:
        """Magnetometer in uT, or None without a device."""
        if self._magnetometer is None:
            return None
        return self._magnetometer.read()
