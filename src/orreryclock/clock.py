"""Clock computation layer — wall-clock sample to orbital angles and digital readout."""

import logging
import math
from collections.abc import Callable
from datetime import datetime

from pytz import UnknownTimeZoneError, timezone

from orreryclock.models import ClockTime, DigitalReadout, OrbitalAngles

logger = logging.getLogger(__name__)


def sample_time(now: datetime) -> ClockTime:
    """Split a wall-clock sample into fractional hours, minutes, and seconds.

    Sub-second precision is truncated to whole milliseconds.

    Args:
        now: Local wall-clock time.

    Returns:
        ClockTime where each component carries the finer components as a fraction.
    """
    ms = now.microsecond // 1000
    s = now.second + ms / 1000
    m = now.minute + s / 60
    h = now.hour + m / 60
    return ClockTime(hours=h, minutes=m, seconds=s)


def orbital_angle(value: float, period: float) -> float:
    """Angle on a dial of `period` units: π at zero, sweeping clockwise."""
    return math.pi - (value / period) * math.pi * 2


def compute_angles(hours: float, minutes: float, seconds: float) -> OrbitalAngles:
    """Map fractional time-of-day components to the three orbital angles.

    The hour body runs on a 12-hour wheel. Total over all real inputs.
    """
    return OrbitalAngles(
        hour=orbital_angle(hours % 12, 12),
        minute=orbital_angle(minutes, 60),
        second=orbital_angle(seconds, 60),
    )


def angles_at(now: datetime) -> OrbitalAngles:
    t = sample_time(now)
    return compute_angles(t.hours, t.minutes, t.seconds)


def orbit_position(angle: float, radius: float) -> tuple[float, float]:
    """(x, z) on a horizontal circle of `radius` for an orbital angle."""
    return math.sin(angle) * radius, math.cos(angle) * radius


def _pad(value: int) -> str:
    return f"0{value}" if value < 10 else str(value)


def format_readout(now: datetime, is_24_hour: bool) -> DigitalReadout:
    """Format the digital clock fields for a wall-clock sample.

    Args:
        now: Wall-clock sample (the same one used for the angles).
        is_24_hour: False maps 0 → 12 and 13..23 → 1..11.

    Returns:
        DigitalReadout with each field zero-padded to two digits.
    """
    h = now.hour
    if not is_24_hour:
        h = h % 12 or 12
    return DigitalReadout(
        hours=_pad(h), minutes=_pad(now.minute), seconds=_pad(now.second)
    )


def viewer_clock(tz_name: str | None) -> Callable[[], datetime]:
    """Wall-clock source in the viewer's time zone.

    Args:
        tz_name: IANA zone name reported by the browser, e.g. 'Asia/Seoul'.

    Returns:
        Zero-argument callable returning the current local time in that zone.
        Falls back to the host's local time when the zone is missing or unknown.
    """
    if not tz_name:
        return datetime.now
    try:
        tz = timezone(tz_name)
    except UnknownTimeZoneError:
        logger.warning("Unknown time zone %r, using host time", tz_name)
        return datetime.now
    return lambda: datetime.now(tz)
