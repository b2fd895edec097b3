"""
Pluggable data sources for motion, location and device heading.

- linux: IIO sysfs + gpsd (Linux only)
- remote: TCP server accepting JSON from Android/iOS or other clients
"""

from transponder.sources.base import (
    HeadingEventSource,
    LocationSource,
    MotionSample,
    MotionSource,
)
from transponder.sources.linux import create_linux_sources
from transponder.sources.remote import RemoteSource, create_remote_source

__all__ = [
    "HeadingEventSource",
    "LocationSource",
    "MotionSample",
    "MotionSource",
    "RemoteSource",
    "create_linux_sources",
    "create_remote_source",
]
