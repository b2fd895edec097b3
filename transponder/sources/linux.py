"""
Linux data sources: IIO sysfs (accelerometer, magnetometer) and gpsd (position).
"""

import logging
from typing import Optional, Tuple

from transponder.geodesy import LocationFix
from transponder.gps_reader import connect_gpsd, get_current_fix
from transponder.heading_source import HeadingEvent
from transponder.iio_reader import (
    IIOReader,
    find_accel_device,
    find_magnetometer_device,
)
from transponder.sources.base import (
    HeadingEventSource,
    LocationSource,
    MotionSample,
    MotionSource,
)

logger = logging.getLogger(__name__)


class LinuxMotionSource(MotionSource):
    """Accelerometer and magnetometer from Linux IIO sysfs."""

    def __init__(self, reader: IIOReader) -> None:
        self._reader = reader
        self.magnetometer_available = reader.magnetometer_path is not None

    def read(self) -> MotionSample:
        return (self._reader.read_accel(), self._reader.read_magnetometer())


class LinuxLocationSource(LocationSource):
    """Position from gpsd."""

    def __init__(self, gpsd_module: Optional[object]) -> None:
        self._gpsd = gpsd_module

    def get_fix(self) -> Optional[LocationFix]:
        return get_current_fix(self._gpsd)

    def access_error(self) -> Optional[str]:
        if self._gpsd is None:
            return "services_disabled"
        return None


class LinuxHeadingSource(HeadingEventSource):
    """Linux has no device heading service; this source always reports failure."""

    def poll_event(self) -> Optional[HeadingEvent]:
        return None

    def failure(self) -> Optional[str]:
        return "no device heading service on Linux"


def create_linux_sources(
    gpsd_host: str,
    gpsd_port: int,
    accel_path_str: Optional[str] = None,
    magnetometer_path_str: Optional[str] = None,
) -> Optional[Tuple[LinuxMotionSource, LinuxLocationSource, LinuxHeadingSource]]:
    """
    Create Linux IIO + gpsd sources.

    Returns (MotionSource, LocationSource, HeadingEventSource), or None if
    neither an accelerometer nor a magnetometer is found.
    gpsd may be unavailable; the location source then reports services_disabled.
    """
    gpsd = connect_gpsd(gpsd_host, gpsd_port)
    if gpsd is None:
        logger.warning("gpsd not available; position will be unavailable.")
    accel_path = find_accel_device(accel_path_str)
    magnetometer_path = find_magnetometer_device(magnetometer_path_str, accel_path)
    if not accel_path and not magnetometer_path:
        return None
    if magnetometer_path:
        logger.info("Magnetometer found at %s", magnetometer_path)
    else:
        logger.warning("No IIO magnetometer; heading will be unavailable")
    reader = IIOReader(accel_path=accel_path, magnetometer_path=magnetometer_path)
    return (
        LinuxMotionSource(reader),
        LinuxLocationSource(gpsd),
        LinuxHeadingSource(),
    )
