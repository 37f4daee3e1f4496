# dental_booking/app/services/slots/calculator.py
"""
Level 1: Slot grid for a day.

Turns (working hours, grid step) into an ordered list of fixed-width slots:
  index 1..n, "HH:MM" boundaries, "09:00 AM-09:30 AM" code.

Contains:
✓ Working hours (normalized from 12h or 24h strings)
✓ Grid step

Does NOT contain:
✗ Bookings (checked at Level 2)
✗ "Now" / past slots (checked at Level 2)
"""

import logging
from collections.abc import Mapping

from .config import BookingConfig, get_booking_config
from .domain import Slot, WorkingHours
from .timefmt import format_from_minutes, parse_minutes, slot_label

logger = logging.getLogger(__name__)


def normalize_working_hours(
    raw: WorkingHours | Mapping | None,
    config: BookingConfig | None = None,
) -> WorkingHours:
    """
    Normalize upstream working hours to 24-hour WorkingHours.

    Accepts:
        {"from_time": "9:00 AM", "to_time": "5:00 PM"}  (clinic API)
        {"start": "09:00", "end": "17:00"}
        WorkingHours(...)
        None / {} → config fallback hours

    Malformed bounds fall back to config defaults with a warning.
    """
    config = config or get_booking_config()

    if isinstance(raw, WorkingHours):
        raw_start, raw_end = raw.start, raw.end
    elif isinstance(raw, Mapping):
        raw_start = raw.get("from_time") or raw.get("start")
        raw_end = raw.get("to_time") or raw.get("end")
    else:
        raw_start = raw_end = None

    if not raw_start and not raw_end:
        return WorkingHours(
            start=format_from_minutes(parse_minutes(config.default_work_start)),
            end=format_from_minutes(parse_minutes(config.default_work_end)),
        )

    start = _normalize_bound(raw_start, config.default_work_start, "start")
    end = _normalize_bound(raw_end, config.default_work_end, "end")
    return WorkingHours(start=start, end=end)


def build_slot_grid(
    working_hours: WorkingHours,
    granularity_minutes: int,
) -> list[Slot]:
    """
    Build the slot grid for one day.

    The trailing partial interval is dropped, not padded:
    09:00-10:15 at 30 min → 09:00-09:30, 09:30-10:00.

    Returns:
        List of Slot, indexes 1..n. Empty list = no slots (start >= end).
    """
    if granularity_minutes <= 0:
        logger.warning("Non-positive slot granularity %r, no slots generated", granularity_minutes)
        return []

    start_min = working_hours.start_min
    end_min = working_hours.end_min
    if start_min >= end_min:
        return []

    slots: list[Slot] = []
    t = start_min
    while t + granularity_minutes <= end_min:
        step_end = t + granularity_minutes
        label = slot_label(t, step_end)
        slots.append(Slot(
            index=len(slots) + 1,
            start=format_from_minutes(t),
            end=format_from_minutes(step_end),
            code=label,
            description=label,
        ))
        t = step_end

    return slots


def build_day_grid(
    raw_working_hours: WorkingHours | Mapping | None,
    config: BookingConfig | None = None,
) -> tuple[WorkingHours, list[Slot]]:
    """Normalize upstream hours and build the grid with the configured step."""
    config = config or get_booking_config()
    working_hours = normalize_working_hours(raw_working_hours, config)
    return working_hours, build_slot_grid(working_hours, config.slot_step_minutes)


# ── Helpers ──────────────────────────────────────────────────────────────


def _normalize_bound(value, default: str, which: str) -> str:
    minutes = parse_minutes(value)
    if minutes is None:
        logger.warning("Malformed working hours %s %r, falling back to %s", which, value, default)
        minutes = parse_minutes(default)
    return format_from_minutes(minutes)
