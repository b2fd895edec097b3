"""
Transponder: point a user at a fixed target from orientation and position sensors.

Fuses accelerometer and magnetometer samples into a tilt-compensated heading,
computes great-circle bearing and distance to the target, selects among heading
sources with graceful fallback, and streams the resulting needle rotation to
presentation clients.
"""

__version__ = "0.1.0"
