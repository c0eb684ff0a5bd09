"""Unit conversion and location-local time helpers - pure functions.

Local wall-clock time is always the UTC instant shifted by the location's
fixed UTC offset in seconds. The process timezone is never consulted.
"""
import math
from datetime import datetime, timedelta, timezone

HOUR_SECONDS = 60 * 60
DAY_SECONDS = 24 * HOUR_SECONDS

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def ms_to_kph(speed_ms: float) -> float:
    """Convert a wind speed in metres per second to km/h."""
    return speed_ms * 3.6


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (also for negatives)."""
    return int(math.floor(value + 0.5))


def round1(value: float) -> float:
    """Round to one decimal place, .05 going up."""
    return math.floor(value * 10 + 0.5) / 10


def to_local(timestamp: int, tz_offset: int = 0) -> datetime:
    """
    Project a UTC timestamp onto the location's wall clock.

    Args:
        timestamp: UNIX timestamp (UTC seconds)
        tz_offset: Location offset from UTC in seconds

    Returns:
        Timezone-aware datetime carrying the fixed offset
    """
    return datetime.fromtimestamp(timestamp, tz=timezone(timedelta(seconds=tz_offset)))


def day_key(timestamp: int, tz_offset: int = 0) -> str:
    """Calendar date (YYYY-MM-DD) of the timestamp in location time."""
    return to_local(timestamp, tz_offset).strftime("%Y-%m-%d")


def local_hour(timestamp: int, tz_offset: int = 0) -> int:
    return to_local(timestamp, tz_offset).hour


def local_month(timestamp: int, tz_offset: int = 0) -> int:
    """Month index 0-11 (0 = January) in location time."""
    return to_local(timestamp, tz_offset).month - 1


def format_time(timestamp: int, tz_offset: int = 0) -> str:
    """Short 12-hour clock label, e.g. "6:00 AM"."""
    local = to_local(timestamp, tz_offset)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"


def format_day(timestamp: int, tz_offset: int = 0) -> str:
    """Short weekday label, e.g. "Sat"."""
    return WEEKDAY_NAMES[to_local(timestamp, tz_offset).weekday()]
