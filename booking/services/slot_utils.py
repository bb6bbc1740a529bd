"""
slot_utils.py
-------------
Candidate appointment start times for the day calendar, plus a helper to
turn a 'YYYY-MM-DD' query string into a date.

The salon books on a fixed 15-minute grid from 09:00 to 20:30 (47 labels).
The grid can be overridden at runtime through configmgr.SystemSetting:
  - BUSINESS_OPEN          first bookable start, e.g. '09:00'
  - BUSINESS_LAST_SLOT     last bookable start, e.g. '20:30'
  - SLOT_INTERVAL_MINUTES  grid step, e.g. '15'
"""

import logging
from datetime import date

from .time_utils import TimeParseError, minutes_to_time, time_to_minutes

logger = logging.getLogger(__name__)

DEFAULT_OPEN = "09:00"
DEFAULT_LAST_SLOT = "20:30"
DEFAULT_SLOT_INTERVAL = 15


def generate_time_slots(
    open_time: str = DEFAULT_OPEN,
    last_slot: str = DEFAULT_LAST_SLOT,
    step_minutes: int = DEFAULT_SLOT_INTERVAL,
) -> list[str]:
    """
    Enumerate "HH:MM" labels from open_time to last_slot inclusive.
    """
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")

    start = time_to_minutes(open_time)
    end = time_to_minutes(last_slot)
    return [minutes_to_time(m) for m in range(start, end + 1, step_minutes)]


DEFAULT_TIME_SLOTS = tuple(generate_time_slots())


def get_business_hours():
    """
    Return (open_label, last_slot_label, step_minutes).
    Falls back to 09:00 / 20:30 / 15 when no usable settings exist.
    """
    defaults = (DEFAULT_OPEN, DEFAULT_LAST_SLOT, DEFAULT_SLOT_INTERVAL)

    from configmgr.models import SystemSetting

    rows = SystemSetting.values_for(["BUSINESS_OPEN", "BUSINESS_LAST_SLOT", "SLOT_INTERVAL_MINUTES"])
    if not rows:
        return defaults

    open_label = rows.get("BUSINESS_OPEN", DEFAULT_OPEN)
    last_label = rows.get("BUSINESS_LAST_SLOT", DEFAULT_LAST_SLOT)
    try:
        step = int(rows.get("SLOT_INTERVAL_MINUTES", DEFAULT_SLOT_INTERVAL))
        time_to_minutes(open_label)
        time_to_minutes(last_label)
    except (TimeParseError, ValueError):
        logger.warning("Ignoring malformed business hour settings: %s", rows)
        return defaults

    if step <= 0 or time_to_minutes(last_label) < time_to_minutes(open_label):
        logger.warning("Ignoring inconsistent business hour settings: %s", rows)
        return defaults

    return open_label, last_label, step


def get_candidate_slots() -> list[str]:
    """The configured candidate start-time grid for one day."""
    open_label, last_label, step = get_business_hours()
    return generate_time_slots(open_label, last_label, step)


def parse_date_param(date_str: str) -> date:
    """
    Parse 'YYYY-MM-DD' (also tolerates a trailing 'THH:MM...' or ' HH:MM').

    Raises:
        ValueError: when the value is not a calendar date.
    """
    date_str = (date_str or "").strip()
    if "T" in date_str:
        date_str = date_str.split("T", 1)[0]
    elif " " in date_str:
        date_str = date_str.split(" ", 1)[0]
    return date.fromisoformat(date_str)
