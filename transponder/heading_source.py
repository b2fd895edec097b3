"""
Heading source selection with graceful fallback.

Preference order: device true heading, device magnetic heading, heading
derived locally from the raw magnetometer, then nothing. Within a session the
selector only ever moves down that list; going back up requires an explicit
reset() by the caller (e.g. when the compass screen is re-entered).

The -1 "unavailable" sentinel of device heading events is understood only by
HeadingEvent.from_sentinels(); everything past it uses None.
"""

import enum
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from transponder.angles import normalize_360
from transponder.orientation import SensorSample, uncompensated_heading

logger = logging.getLogger(__name__)

HEADING_SENTINEL = -1.0


class SelectorState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    TRUE_HEADING_ACTIVE = "true_heading_active"
    MAGNETIC_HEADING_ACTIVE = "magnetic_heading_active"
    MAGNETOMETER_FALLBACK_ACTIVE = "magnetometer_fallback_active"
    UNAVAILABLE = "unavailable"


class SourceKind(enum.Enum):
    TRUE_HEADING = "true_heading"
    MAGNETIC_HEADING = "magnetic_heading"
    MAGNETOMETER_DERIVED = "magnetometer_derived"
    UNAVAILABLE = "unavailable"


_STATE_SOURCE = {
    SelectorState.UNINITIALIZED: SourceKind.UNAVAILABLE,
    SelectorState.TRUE_HEADING_ACTIVE: SourceKind.TRUE_HEADING,
    SelectorState.MAGNETIC_HEADING_ACTIVE: SourceKind.MAGNETIC_HEADING,
    SelectorState.MAGNETOMETER_FALLBACK_ACTIVE: SourceKind.MAGNETOMETER_DERIVED,
    SelectorState.UNAVAILABLE: SourceKind.UNAVAILABLE,
}


def _from_sentinel(value: Optional[float]) -> Optional[float]:
    """None for the sentinel (any negative) or a non-finite value."""
    if value is None:
        return None
    v = float(value)
    if not math.isfinite(v) or v < 0:
        return None
    return normalize_360(v)


@dataclass(frozen=True)
class HeadingEvent:
    """Device-reported heading; None means the field was unavailable."""

    true_heading: Optional[float] = None
    magnetic_heading: Optional[float] = None
    timestamp: Optional[float] = None

    @classmethod
    def from_sentinels(
        cls,
        true_heading: Optional[float],
        magnetic_heading: Optional[float],
        timestamp: Optional[float] = None,
    ) -> "HeadingEvent":
        """
        Convert a raw event that uses -1 for "unavailable".

        Negative and non-finite values become None; other values are
        normalized to [0, 360).
        """
        return cls(
            true_heading=_from_sentinel(true_heading),
            magnetic_heading=_from_sentinel(magnetic_heading),
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class HeadingReading:
    """The single heading exposed to the presentation layer."""

    degrees: float
    source: SourceKind
    authoritative: bool
    timestamp: Optional[float] = None


class HeadingSourceSelector:
    """
    State machine over heading sources; sole owner of the current heading.

    magnetometer_available says whether the local magnetometer can serve as
    fallback when the device heading source fails. Rates are handed back to
    the sensor collaborator through sample_interval_s; the selector owns no
    timers.
    """

    def __init__(
        self,
        magnetometer_available: bool = True,
        primary_rate_hz: float = 10.0,
        fallback_rate_hz: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if primary_rate_hz <= 0 or fallback_rate_hz <= 0:
            raise ValueError("sample rates must be positive")
        self._magnetometer_available = magnetometer_available
        self._primary_rate_hz = primary_rate_hz
        self._fallback_rate_hz = fallback_rate_hz
        self._clock = clock
        self._state = SelectorState.UNINITIALIZED
        self._heading: Optional[float] = None
        self._timestamp: Optional[float] = None
        self._fresh = False

    @property
    def state(self) -> SelectorState:
        return self._state

    @property
    def magnetometer_available(self) -> bool:
        return self._magnetometer_available

    @property
    def sample_interval_s(self) -> float:
        """Sensor polling interval the collaborator should use right now."""
        if self._state is SelectorState.MAGNETOMETER_FALLBACK_ACTIVE:
            return 1.0 / self._fallback_rate_hz
        return 1.0 / self._primary_rate_hz

    def current_heading(self) -> HeadingReading:
        """
        Current heading, its source, and whether it is authoritative.

        Without an active source the last known value (0 if none) is
        returned with authoritative=False.
        """
        degrees = self._heading if self._heading is not None else 0.0
        authoritative = self._fresh and self._state in (
            SelectorState.TRUE_HEADING_ACTIVE,
            SelectorState.MAGNETIC_HEADING_ACTIVE,
            SelectorState.MAGNETOMETER_FALLBACK_ACTIVE,
        )
        return HeadingReading(
            degrees=degrees,
            source=_STATE_SOURCE[self._state],
            authoritative=authoritative,
            timestamp=self._timestamp,
        )

    def on_heading_event(self, event: HeadingEvent) -> HeadingReading:
        """Adopt the best heading the current state still allows."""
        state = self._state
        if state in (
            SelectorState.MAGNETOMETER_FALLBACK_ACTIVE,
            SelectorState.UNAVAILABLE,
        ):
            return self.current_heading()
        if state is not SelectorState.MAGNETIC_HEADING_ACTIVE and (
            event.true_heading is not None
        ):
            self._transition(SelectorState.TRUE_HEADING_ACTIVE)
            self._adopt(event.true_heading, event.timestamp)
        elif event.magnetic_heading is not None:
            self._transition(SelectorState.MAGNETIC_HEADING_ACTIVE)
            self._adopt(event.magnetic_heading, event.timestamp)
        else:
            self._source_failed("heading event carried no usable value")
        return self.current_heading()

    def on_heading_source_error(self, reason: str = "") -> HeadingReading:
        """The device heading source failed to start or stopped working."""
        if self._state in (
            SelectorState.UNINITIALIZED,
            SelectorState.TRUE_HEADING_ACTIVE,
            SelectorState.MAGNETIC_HEADING_ACTIVE,
        ):
            self._source_failed(reason or "device heading source error")
        return self.current_heading()

    def on_magnetometer_sample(self, sample: SensorSample) -> HeadingReading:
        """Feed the fallback path; ignored unless the fallback is active."""
        if self._state is SelectorState.MAGNETOMETER_FALLBACK_ACTIVE:
            self._adopt(uncompensated_heading(sample), None)
        return self.current_heading()

    def on_magnetometer_unavailable(self) -> HeadingReading:
        """The local magnetometer is gone; the fallback can no longer serve."""
        self._magnetometer_available = False
        if self._state is SelectorState.MAGNETOMETER_FALLBACK_ACTIVE:
            logger.warning("Magnetometer lost during fallback")
            self._transition(SelectorState.UNAVAILABLE)
        return self.current_heading()

    def reset(self) -> None:
        """Explicit re-initialization: back to UNINITIALIZED, nothing remembered."""
        logger.info("Heading source selector reset")
        self._state = SelectorState.UNINITIALIZED
        self._heading = None
        self._timestamp = None
        self._fresh = False

    def _source_failed(self, reason: str) -> None:
        if self._magnetometer_available:
            logger.warning("%s; falling back to magnetometer", reason)
            self._transition(SelectorState.MAGNETOMETER_FALLBACK_ACTIVE)
        else:
            logger.error("%s; no magnetometer fallback, heading unavailable", reason)
            self._transition(SelectorState.UNAVAILABLE)

    def _adopt(self, degrees: float, timestamp: Optional[float]) -> None:
        self._heading = degrees
        self._timestamp = timestamp if timestamp is not None else self._clock()
        self._fresh = True

    def _transition(self, new_state: SelectorState) -> None:
        if new_state is self._state:
            return
        logger.info(
            "Heading source %s -> %s", self._state.value, new_state.value
        )
        self._state = new_state
        # a new source has not supplied a value yet
        self._fresh = False
