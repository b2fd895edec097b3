"""
Main loop: feed sensor, location and heading events into the core, stream the
indicator state as JSON lines.
"""

import logging
import select
import signal
import sys
import time
from typing import Optional, Tuple

from transponder.angles import cardinal_point
from transponder.config import Config, parse_args
from transponder.core import IndicatorState, Transponder
from transponder.errors import (
    LocationAccessError,
    OutOfRangeCoordinate,
    PermissionDenied,
    SensorUnavailable,
    ServicesDisabled,
)
from transponder.formatting import format_coordinate, format_distance
from transponder.heading_source import SelectorState
from transponder.output_server import IndicatorServer
from transponder.sources import create_linux_sources, create_remote_source
from transponder.sources.base import HeadingEventSource, LocationSource, MotionSource

logger = logging.getLogger(__name__)

_shutdown = False

_LOCATION_ERRORS = {
    "permission_denied": PermissionDenied("Location permission denied"),
    "services_disabled": ServicesDisabled("Location services are disabled"),
}

Sources = Tuple[MotionSource, LocationSource, HeadingEventSource]


def _signal_handler(signum: int, frame: Optional[object]) -> None:
    global _shutdown
    _shutdown = True


def _open_sources(config: Config) -> Optional[Sources]:
    """Return (motion, location, heading) sources, or None on failure."""
    if config.source in ("linux", "auto"):
        sources = create_linux_sources(
            config.gpsd_host,
            config.gpsd_port,
            config.accel_path,
            config.magnetometer_path,
        )
        if sources:
            logger.info("Using Linux source (IIO + gpsd)")
            return sources
        if config.source == "linux":
            logger.error(
                "IIO accel/magnetometer not found. Use --source=remote for Android/iOS."
            )
            return None
    remote = create_remote_source(config.remote_host, config.remote_port)
    if not remote:
        logger.error("Remote source bind failed")
        return None
    logger.info("Using remote source (waiting for Android/iOS client)")
    return (remote, remote, remote)


def build_output(transponder: Transponder, state: IndicatorState) -> dict:
    """State dict for presentation clients, with display helpers added."""
    data = state.to_dict()
    data["sample_interval_s"] = transponder.selector.sample_interval_s
    data["cardinal"] = cardinal_point(state.heading.degrees)
    data["distance_text"] = None
    if state.navigation is not None:
        data["distance_text"] = format_distance(state.navigation.distance_m)
    data["position_text"] = None
    position = transponder.navigator.position
    if position is not None:
        data["position_text"] = "%s, %s" % (
            format_coordinate(position.latitude),
            format_coordinate(position.longitude, is_longitude=True),
        )
    return data


def check_heading_timeout(
    transponder: Transponder,
    heading_source: HeadingEventSource,
    timeout_s: float,
    now: float,
) -> bool:
    """
    Fail the device heading source if it connected but produced no heading
    within timeout_s. The clock starts at heading_source.connected_at(), so a
    source still waiting for its client is never timed out.

    Returns True if the timeout fired.
    """
    if transponder.selector.state is not SelectorState.UNINITIALIZED:
        return False
    connected_at = heading_source.connected_at()
    if connected_at is None or (now - connected_at) < timeout_s:
        return False
    transponder.on_heading_source_error(
        f"no device heading within {timeout_s:g}s of connecting"
    )
    return True


def poll_once(
    transponder: Transponder,
    motion: MotionSource,
    heading_source: HeadingEventSource,
) -> IndicatorState:
    """One sensor cycle: heading source status, device heading, then samples."""
    if not motion.magnetometer_available and transponder.selector.magnetometer_available:
        transponder.on_magnetometer_unavailable()
    failure = heading_source.failure()
    if failure:
        transponder.on_heading_source_error(failure)
    event = heading_source.poll_event()
    if event is not None:
        transponder.on_heading_event(event)
    accel, magnetometer = motion.read()
    if accel is not None:
        transponder.on_accelerometer_sample(accel)
    if magnetometer is not None:
        transponder.on_magnetometer_sample(magnetometer)
    return transponder.state()


def poll_location(transponder: Transponder, location: LocationSource) -> None:
    """Feed the latest fix, or the access error that prevents one."""
    error = location.access_error()
    if error:
        if transponder.location_error is None:
            exc: LocationAccessError = _LOCATION_ERRORS.get(
                error, LocationAccessError(error)
            )
            transponder.on_location_error(exc)
        return
    fix = location.get_fix()
    if fix is None:
        return
    try:
        transponder.on_location_update(fix)
    except OutOfRangeCoordinate as e:
        logger.warning("Ignoring location fix: %s", e)


def run(config: Config) -> int:  # noqa: C901
    """
    Run the daemon: sensor and location events in, indicator JSON out.

    Returns exit code (0 = success).
    """
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    log_level = logging.DEBUG if config.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    sources = _open_sources(config)
    if sources is None:
        return 1
    motion, location, heading_source = sources

    transponder = Transponder(
        config.target,
        magnetometer_available=motion.magnetometer_available,
        primary_rate_hz=config.sample_rate_hz,
        fallback_rate_hz=config.fallback_rate_hz,
    )
    logger.info(
        "Target %.6f,%.6f", config.target.latitude, config.target.longitude
    )

    server = IndicatorServer(host=config.output_host, port=config.output_port)
    if not server.start():
        heading_source.stop()
        return 1

    output_interval = 1.0 / config.output_rate_hz
    last_sample_time = 0.0
    last_location_time = 0.0
    last_output_time = 0.0
    unavailable_logged = False

    try:
        while not _shutdown:
            sample_interval = transponder.selector.sample_interval_s
            sock = server.get_socket()
            if sock:
                r, _, _ = select.select(
                    [sock], [], [], min(sample_interval, output_interval, 0.1)
                )
                if r:
                    server.accept_new()
            now = time.monotonic()

            if (now - last_sample_time) >= sample_interval:
                last_sample_time = now
                poll_once(transponder, motion, heading_source)
                check_heading_timeout(
                    transponder, heading_source, config.heading_timeout_s, now
                )

            if (now - last_location_time) >= config.location_interval_s:
                last_location_time = now
                poll_location(transponder, location)

            if (now - last_output_time) >= output_interval:
                last_output_time = now
                try:
                    transponder.require_heading()
                except SensorUnavailable as e:
                    if not unavailable_logged:
                        logger.error("%s", e)
                        unavailable_logged = True
                server.send_state(build_output(transponder, transponder.state()))

    except KeyboardInterrupt:
        pass
    finally:
        server.stop()
        heading_source.stop()

    return 0


def main() -> None:
    """Entry point for the transponder script."""
    config = parse_args()
    sys.exit(run(config))


if __name__ == "__main__":
    main()
