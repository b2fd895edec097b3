"""
Configuration defaults and parsing for transponder.
"""

import argparse
from dataclasses import dataclass
from typing import Optional

from transponder.errors import OutOfRangeCoordinate
from transponder.geodesy import GeoPoint


@dataclass
class Config:
    """Runtime configuration."""

    source: str = "linux"
    gpsd_host: str = "127.0.0.1"
    gpsd_port: int = 2947
    remote_host: str = "0.0.0.0"
    remote_port: int = 2949
    output_host: str = "127.0.0.1"
    output_port: int = 2950
    target_lat: float = 37.7749
    target_lon: float = -122.4194
    sample_rate_hz: float = 10.0
    fallback_rate_hz: float = 5.0
    location_interval_s: float = 2.0
    heading_timeout_s: float = 5.0
    output_rate_hz: float = 5.0
    accel_path: Optional[str] = None
    magnetometer_path: Optional[str] = None
    debug: bool = False

    @property
    def target(self) -> GeoPoint:
        return GeoPoint(self.target_lat, self.target_lon)


def _positive_float(text: str) -> float:
    value = float(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {text}")
    return value


def parse_args(args: Optional[list] = None) -> Config:
    """Parse command-line arguments into Config."""
    parser = argparse.ArgumentParser(
        description="Point toward a fixed target from IMU and location sensors; "
        "stream heading, bearing and needle rotation as JSON lines."
    )
    parser.add_argument(
        "--source",
        choices=("linux", "remote", "auto"),
        default="linux",
        help="Source: linux (IIO+gpsd), remote (TCP), auto (default: linux)",
    )
    parser.add_argument(
        "--remote-port",
        type=int,
        default=2949,
        help="Port for remote source (default: 2949)",
    )
    parser.add_argument(
        "--remote-host",
        default="0.0.0.0",
        help="Bind address for remote source (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--gpsd-host",
        default="127.0.0.1",
        help="gpsd host (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--gpsd-port",
        type=int,
        default=2947,
        help="gpsd port (default: 2947)",
    )
    parser.add_argument(
        "--output-host",
        default="127.0.0.1",
        help="Bind address for indicator JSON server (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--output-port",
        type=int,
        default=2950,
        help="Port for indicator JSON server (default: 2950)",
    )
    parser.add_argument(
        "--target-lat",
        type=float,
        default=37.7749,
        help="Target latitude in degrees (default: 37.7749)",
    )
    parser.add_argument(
        "--target-lon",
        type=float,
        default=-122.4194,
        help="Target longitude in degrees (default: -122.4194)",
    )
    parser.add_argument(
        "--sample-rate",
        type=_positive_float,
        default=10.0,
        help="Accelerometer/magnetometer rate in Hz (default: 10)",
    )
    parser.add_argument(
        "--fallback-rate",
        type=_positive_float,
        default=5.0,
        help="Magnetometer rate in Hz while it is the heading fallback (default: 5)",
    )
    parser.add_argument(
        "--location-interval",
        type=_positive_float,
        default=2.0,
        help="Seconds between location polls (default: 2)",
    )
    parser.add_argument(
        "--heading-timeout",
        type=_positive_float,
        default=5.0,
        help="Seconds to wait for a device heading before the magnetometer "
        "fallback (default: 5)",
    )
    parser.add_argument(
        "--output-rate",
        type=_positive_float,
        default=5.0,
        help="Indicator output rate in Hz (default: 5)",
    )
    parser.add_argument(
        "--accel-path",
        default=None,
        help="IIO sysfs path for accelerometer (e.g. /sys/bus/iio/devices/iio:device0)",
    )
    parser.add_argument(
        "--magnetometer-path",
        default=None,
        help="IIO sysfs path for magnetometer (default: auto-detect)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parsed = parser.parse_args(args)
    try:
        GeoPoint(parsed.target_lat, parsed.target_lon)
    except OutOfRangeCoordinate as e:
        parser.error(f"invalid target: {e}")
    return Config(
        source=parsed.source,
        gpsd_host=parsed.gpsd_host,
        gpsd_port=parsed.gpsd_port,
        remote_host=parsed.remote_host,
        remote_port=parsed.remote_port,
        output_host=parsed.output_host,
        output_port=parsed.output_port,
        target_lat=parsed.target_lat,
        target_lon=parsed.target_lon,
        sample_rate_hz=parsed.sample_rate,
        fallback_rate_hz=parsed.fallback_rate,
        location_interval_s=parsed.location_interval,
        heading_timeout_s=parsed.heading_timeout,
        output_rate_hz=parsed.output_rate,
        accel_path=parsed.accel_path,
        magnetometer_path=parsed.magnetometer_path,
        debug=parsed.debug,
    )
