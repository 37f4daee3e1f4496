# dental_booking/app/services/slots/timefmt.py
"""
Time string normalization.

Upstream data mixes clock styles:
  - 24-hour: "09:00", "9:30", "17"
  - 12-hour: "9:00 AM", "09:30 pm", "9am", "12 PM"

Inside the engine every time is minutes since midnight (int).
"24:00" is accepted as the end of the day (1440).
"""

import re
from enum import Enum


MINUTES_PER_DAY = 24 * 60
DEFAULT_TIME = "09:00"

_TIME_12H = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*([ap])\.?\s*m\.?$", re.IGNORECASE)
_TIME_24H = re.compile(r"^(\d{1,2})(?::(\d{2}))?$")


class TimeStyle(str, Enum):
    """Output styles for format_from_minutes()."""
    H24 = "24h"              # "09:00"
    H12 = "12h"              # "09:00 AM" (slot codes)
    H12_SHORT = "12h_short"  # "9:00 AM" (display)


def parse_minutes(text: str | None) -> int | None:
    """
    Parse a clock string into minutes since midnight.

    Returns None when the string is not a recognizable time.
    """
    if not isinstance(text, str):
        return None
    clean = text.strip()

    match = _TIME_12H.match(clean)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2) or 0)
        meridian = match.group(3).lower()
        if hours > 12 or minutes > 59:
            return None
        if meridian == "p" and hours != 12:
            hours += 12
        elif meridian == "a" and hours == 12:
            hours = 0
        return hours * 60 + minutes

    match = _TIME_24H.match(clean)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2) or 0)
        if minutes > 59:
            return None
        total = hours * 60 + minutes
        if total > MINUTES_PER_DAY:
            return None
        return total

    return None


def normalize_to_minutes(text: str | None, default: str = DEFAULT_TIME) -> int:
    """
    Like parse_minutes(), but never fails: unparseable input yields `default`.

    Callers that care about data quality check parse_minutes() first
    and log the fallback themselves.
    """
    minutes = parse_minutes(text)
    if minutes is None:
        minutes = parse_minutes(default)
    if minutes is None:
        raise ValueError(f"Fallback time {default!r} is not a valid time")
    return minutes


def normalize_time(text: str | None, default: str = DEFAULT_TIME) -> str:
    """Normalize any supported clock string to 24-hour "HH:MM"."""
    return format_from_minutes(normalize_to_minutes(text, default))


def format_from_minutes(minutes: int, style: TimeStyle = TimeStyle.H24) -> str:
    """
    Format minutes since midnight.

    - H24:       540 → "09:00", 1440 → "24:00"
    - H12:       540 → "09:00 AM", 780 → "01:00 PM", 1440 → "12:00 AM"
    - H12_SHORT: 540 → "9:00 AM"
    """
    if style == TimeStyle.H24:
        if minutes == MINUTES_PER_DAY:
            return "24:00"
        minutes %= MINUTES_PER_DAY
        return f"{minutes // 60:02d}:{minutes % 60:02d}"

    minutes %= MINUTES_PER_DAY
    hours, mins = divmod(minutes, 60)
    meridian = "AM" if hours < 12 else "PM"
    hour_12 = hours % 12 or 12

    if style == TimeStyle.H12_SHORT:
        return f"{hour_12}:{mins:02d} {meridian}"
    return f"{hour_12:02d}:{mins:02d} {meridian}"


def slot_label(start_min: int, end_min: int) -> str:
    """Human-readable slot code: "09:00 AM-09:30 AM"."""
    return f"{format_from_minutes(start_min, TimeStyle.H12)}-{format_from_minutes(end_min, TimeStyle.H12)}"
