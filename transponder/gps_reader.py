"""
Device position from gpsd.
"""

import logging
from typing import Optional

from transponder.geodesy import LocationFix

logger = logging.getLogger(__name__)


def connect_gpsd(host: str = "127.0.0.1", port: int = 2947) -> Optional[object]:
    """
    Connect to gpsd and return the gpsd module (gpsd-py3).

    Returns None on failure.
    """
    try:
        import gpsd  # type: ignore[import-untyped]

        gpsd.connect(host=host, port=port)
        return gpsd  # type: ignore[no-any-return]
    except Exception as e:
        logger.error("gpsd connect failed: %s", e)
        return None


def _accuracy_m(packet: object) -> float:
    """Horizontal error estimate in metres; 0 when gpsd has none."""
    try:
        x_err, y_err = packet.position_precision()  # type: ignore[attr-defined]
        return float(max(x_err, y_err))
    except Exception:
        return 0.0


def get_current_fix(gpsd_module: Optional[object]) -> Optional[LocationFix]:
    """
    Get current fix from gpsd.

    Returns a LocationFix, or None when there is no 2D/3D fix or on error.
    """
    if gpsd_module is None:
        return None
    try:
        packet = gpsd_module.get_current()  # type: ignore[attr-defined]
        if packet is None or packet.mode < 2:
            return None
        lat, lon = packet.position()
        return LocationFix(
            latitude=float(lat),
            longitude=float(lon),
            accuracy_m=_accuracy_m(packet),
        )
    except Exception as e:
        logger.debug("get_current_fix error: %s", e)
        return None
