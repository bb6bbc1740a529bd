"""
time_utils.py
-------------
Wall-clock helpers for the appointment calendar.

Times travel through the booking screens as zero-padded "HH:MM" labels
(the time columns may also hand back "HH:MM:SS"). Everything here converts
those labels to and from minutes since midnight.

Notes:
- A malformed label raises TimeParseError instead of producing a garbage
  number; callers that must never raise (the availability checker) catch it
  and treat the slot as unavailable.
- add_minutes() wraps past midnight the way a clock does. The calendar is a
  single operating day, so nothing downstream relies on the wrapped value.
"""

from datetime import time

MINUTES_PER_DAY = 24 * 60


class TimeParseError(ValueError):
    """Raised when a value is not a usable "HH:MM" time."""


def time_to_minutes(value) -> int:
    """
    Convert "HH:MM" (or a datetime.time) into minutes since midnight.

    Raises:
        TimeParseError: for anything that is not two or three numeric,
        colon-separated fields within a 24h clock.
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute

    if not isinstance(value, str):
        raise TimeParseError(f"Expected an 'HH:MM' string, got {value!r}")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise TimeParseError(f"Invalid time {value!r}")

    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        raise TimeParseError(f"Invalid time {value!r}") from None

    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise TimeParseError(f"Time out of range {value!r}")

    return hours * 60 + minutes


def minutes_to_time(total_minutes: int) -> str:
    """Format minutes since midnight as "HH:MM", rolling over at 24h."""
    total_minutes = int(total_minutes) % MINUTES_PER_DAY
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def add_minutes(value, duration: int) -> str:
    """Return the "HH:MM" label `duration` minutes after `value`."""
    return minutes_to_time(time_to_minutes(value) + int(duration))


def to_time(value) -> time:
    """Parse "HH:MM" into a datetime.time (for model fields)."""
    minutes = time_to_minutes(value)
    return time(minutes // 60, minutes % 60)


def to_label(value) -> str:
    """Normalise a time or "HH:MM[:SS]" string to an "HH:MM" label."""
    return minutes_to_time(time_to_minutes(value))


def end_time_for(start, duration_minutes: int) -> str:
    # Same as add_minutes but tolerates a missing duration (end == start).
    return add_minutes(start, duration_minutes or 0)
