"""
Remote data source: TCP server accepting JSON from Android/iOS or other clients.

Protocol: one JSON object per line (newline-delimited). Keys may be combined.
- Motion: {"accel":[x,y,z]} (g), {"magnetometer":[x,y,z]} (uT)
- Location: {"lat":float,"lon":float,"accuracy":float}
- Device heading: {"true_heading":float,"mag_heading":float}, -1 = unavailable
- Failures: {"heading_error":str}, {"magnetometer_available":false},
  {"location_error":"permission_denied"|"services_disabled"}
"""

import json
import logging
import math
import socket
import threading
import time
from typing import Optional

from transponder.geodesy import LocationFix
from transponder.heading_source import HEADING_SENTINEL, HeadingEvent
from transponder.orientation import SensorSample
from transponder.sources.base import (
    HeadingEventSource,
    LocationSource,
    MotionSample,
    MotionSource,
)

logger = logging.getLogger(__name__)

LOCATION_ERRORS = ("permission_denied", "services_disabled")


def _parse_triple(value: object) -> Optional[SensorSample]:
    """SensorSample from a list of 3 finite numbers, else None."""
    if not isinstance(value, (list, tuple)) or len(value) < 3:
        return None
    try:
        sample = SensorSample.from_sequence(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not all(math.isfinite(v) for v in sample.as_tuple()):
        return None
    return sample


def _parse_heading(value: object) -> float:
    """Heading field as float; anything unusable becomes the sentinel."""
    if value is None or isinstance(value, bool):
        return HEADING_SENTINEL
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return HEADING_SENTINEL


class RemoteSource(MotionSource, LocationSource, HeadingEventSource):
    """
    Single source that provides motion, location and heading from a remote TCP client.

    Start the server with start(); then read(), get_fix() and poll_event()
    return the latest data received from the client.
    """

    def __init__(self, host: str = "0.0.0.0", port: int = 2949) -> None:
        self._host = host
        self._port = port
        self._lock = threading.Lock()
        self._last_accel: Optional[SensorSample] = None
        self._last_magnetometer: Optional[SensorSample] = None
        self._last_fix: Optional[LocationFix] = None
        self._pending_heading: Optional[HeadingEvent] = None
        self._heading_failure: Optional[str] = None
        self._location_error: Optional[str] = None
        self._connected_at: Optional[float] = None
        self.magnetometer_available = True
        self._sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._shutdown = False

    def start(self) -> bool:
        """Bind and start the listener thread. Return True on success."""
        try:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._sock.bind((self._host, self._port))
            self._sock.listen(1)
            self._sock.settimeout(1.0)
            self._thread = threading.Thread(target=self._accept_loop, daemon=True)
            self._thread.start()
            logger.info(
                "Remote source listening on %s:%s (Android/iOS clients)",
                self._host,
                self._port,
            )
            return True
        except OSError as e:
            logger.error("Remote source bind failed: %s", e)
            return False

    def stop(self) -> None:
        """Stop the listener and close the socket."""
        self._shutdown = True
        if self._sock:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None
        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None

    def _accept_loop(self) -> None:
        while not self._shutdown and self._sock:
            try:
                client, addr = self._sock.accept()
                logger.info("Remote client connected from %s", addr)
                with self._lock:
                    if self._connected_at is None:
                        self._connected_at = time.monotonic()
                try:
                    client.settimeout(5.0)
                    with client.makefile(mode="r", encoding="utf-8") as f:
                        for line in f:
                            if self._shutdown:
                                break
                            line = line.strip()
                            if not line:
                                continue
                            self._parse_line(line)
                except (
                    ConnectionResetError,
                    BrokenPipeError,
                    socket.timeout,
                    UnicodeDecodeError,
                ) as e:
                    logger.debug("Remote client error: %s", e)
                finally:
                    try:
                        client.close()
                    except OSError:
                        pass
                    logger.info("Remote client disconnected")
            except socket.timeout:
                continue
            except OSError:
                if not self._shutdown:
                    logger.debug("Remote accept error")
                break

    def _parse_line(self, line: str) -> None:  # noqa: C901
        try:
            data = json.loads(line)
        except (ValueError, RecursionError):
            return
        if not isinstance(data, dict):
            return
        with self._lock:
            accel = _parse_triple(data.get("accel"))
            if accel is not None:
                self._last_accel = accel
            magnetometer = _parse_triple(data.get("magnetometer"))
            if magnetometer is not None:
                self._last_magnetometer = magnetometer
            if data.get("magnetometer_available") is False:
                self.magnetometer_available = False
            if "lat" in data and "lon" in data:
                try:
                    lat = float(data["lat"])
                    lon = float(data["lon"])
                    accuracy = float(data.get("accuracy") or 0)
                except (TypeError, ValueError, OverflowError):
                    pass
                else:
                    self._last_fix = LocationFix(
                        latitude=lat, longitude=lon, accuracy_m=accuracy
                    )
                    self._location_error = None
            if "true_heading" in data or "mag_heading" in data:
                self._pending_heading = HeadingEvent.from_sentinels(
                    _parse_heading(data.get("true_heading")),
                    _parse_heading(data.get("mag_heading")),
                )
            if isinstance(data.get("heading_error"), str):
                self._heading_failure = data["heading_error"] or "heading error"
            if data.get("location_error") in LOCATION_ERRORS:
                self._location_error = data["location_error"]
                self._last_fix = None

    def read(self) -> MotionSample:
        with self._lock:
            return (self._last_accel, self._last_magnetometer)

    def get_fix(self) -> Optional[LocationFix]:
        with self._lock:
            return self._last_fix

    def access_error(self) -> Optional[str]:
        with self._lock:
            return self._location_error

    def poll_event(self) -> Optional[HeadingEvent]:
        with self._lock:
            event = self._pending_heading
            self._pending_heading = None
            return event

    def failure(self) -> Optional[str]:
        with self._lock:
            return self._heading_failure

    def connected_at(self) -> Optional[float]:
        """Time the first client connected; the heading timeout starts there."""
        with self._lock:
            return self._connected_at


def create_remote_source(host: str, port: int) -> Optional[RemoteSource]:
    """Create and start the remote source. Returns None on bind failure."""
    source = RemoteSource(host=host, port=port)
    if source.start():
        return source
    return None
