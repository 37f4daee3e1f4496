# dental_booking/app/services/slots/availability.py
"""
Level 2: Slot availability.

Overlays on the Level 1 grid:
- Existing bookings (half-open overlap: booking_start < slot_end and booking_end > slot_start)
- "Now" (only when viewing today; future dates are never past)
- Slots the caller marks unavailable (e.g. outside the dentist's own hours)

and answers, for any start slot, which contiguous run of slots_needed
slots it would reserve and whether that run is legal.

Holds no state between calls: re-run on every input change.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime

from .domain import Booking, CandidateRun, RunRejection, Slot, SlotState
from .timefmt import MINUTES_PER_DAY, parse_minutes

logger = logging.getLogger(__name__)

# States that make a run illegal. UNAVAILABLE only makes it non-uniform.
_HARD_STATES = (SlotState.OCCUPIED, SlotState.PAST)


class Availability:
    """Per-slot states for one grid plus candidate-run lookup."""

    def __init__(
        self,
        grid: list[Slot],
        states: dict[int, SlotState],
        slots_needed: int,
    ):
        self.grid = grid
        self.states = states
        self.slots_needed = max(1, slots_needed)
        self._by_index = {slot.index: slot for slot in grid}

    @property
    def last_index(self) -> int:
        return self.grid[-1].index if self.grid else 0

    def slot(self, index: int) -> Slot | None:
        return self._by_index.get(index)

    def state(self, index: int) -> SlotState | None:
        return self.states.get(index)

    def is_free(self, index: int) -> bool:
        return self.states.get(index) == SlotState.FREE

    def candidate_run(self, start_index: int) -> CandidateRun:
        """
        Contiguous run that selecting start_index would reserve.

        Illegal when:
        - the run ends past the last slot (BOUNDARY_EXCEEDED)
        - an index in the run is missing from the grid (GAP_IN_RANGE)
        - a slot in the run is occupied or past (OCCUPIED_OR_PAST_IN_RANGE)
        """
        end_index = start_index + self.slots_needed - 1

        if end_index > self.last_index:
            return CandidateRun(start_index=start_index, reason=RunRejection.BOUNDARY_EXCEEDED)

        run = tuple(range(start_index, end_index + 1))
        if any(index not in self._by_index for index in run):
            return CandidateRun(start_index=start_index, reason=RunRejection.GAP_IN_RANGE)

        if any(self.states[index] in _HARD_STATES for index in run):
            return CandidateRun(start_index=start_index, reason=RunRejection.OCCUPIED_OR_PAST_IN_RANGE)

        return CandidateRun(
            start_index=start_index,
            run_indexes=run,
            legal=True,
            uniform=all(self.states[index] == SlotState.FREE for index in run),
        )

    def display_state(self, index: int) -> SlotState | None:
        """State for rendering: a free slot that cannot start a legal run is BLOCKED."""
        state = self.states.get(index)
        if state == SlotState.FREE and not self.candidate_run(index).legal:
            return SlotState.BLOCKED
        return state

    def free_start_indexes(self) -> list[int]:
        """Indexes from which a full, uniform run can be selected."""
        result = []
        for slot in self.grid:
            if not self.is_free(slot.index):
                continue
            run = self.candidate_run(slot.index)
            if run.legal and run.uniform:
                result.append(slot.index)
        return result


def resolve_states(
    slot_grid: list[Slot],
    bookings: Iterable[Booking | Mapping],
    past_cutoff: int | None,
    slots_needed: int,
    unavailable: Iterable[int] = (),
) -> Availability:
    """
    Resolve per-slot states.

    Precedence (first match wins): occupied → past → unavailable → free.

    Args:
        slot_grid: Level 1 grid
        bookings: Booking intervals on the viewed day
        past_cutoff: Minutes since midnight; slots starting at or before it are past.
                     None = nothing is past (future date). See past_cutoff().
        slots_needed: Run length for candidate runs
        unavailable: Slot indexes the caller marks unavailable
    """
    step = _grid_step(slot_grid)
    intervals = booking_intervals(bookings, step)
    unavailable_set = set(unavailable)

    states: dict[int, SlotState] = {}
    for slot in slot_grid:
        slot_start = slot.start_min
        slot_end = slot.end_min

        if any(b_start < slot_end and b_end > slot_start for b_start, b_end in intervals):
            states[slot.index] = SlotState.OCCUPIED
        elif past_cutoff is not None and slot_start <= past_cutoff:
            states[slot.index] = SlotState.PAST
        elif slot.index in unavailable_set:
            states[slot.index] = SlotState.UNAVAILABLE
        else:
            states[slot.index] = SlotState.FREE

    return Availability(slot_grid, states, slots_needed)


def past_cutoff(
    viewed_date: date | datetime | None,
    now: datetime | None = None,
) -> int | None:
    """
    Cutoff for past slots on the viewed date.

    - future date → None (today's clock never constrains other days)
    - today (or no date) → minutes since midnight of now
    - earlier date → end of day (every slot is past)
    """
    now = now or datetime.now()
    today = now.date()

    if viewed_date is None:
        viewed = today
    elif isinstance(viewed_date, datetime):
        viewed = viewed_date.date()
    else:
        viewed = viewed_date

    if viewed > today:
        return None
    if viewed < today:
        return MINUTES_PER_DAY
    return now.hour * 60 + now.minute


def booking_intervals(
    bookings: Iterable[Booking | Mapping],
    step_minutes: int,
) -> list[tuple[int, int]]:
    """
    Convert bookings to [start, end) minute intervals.

    - Accepts Booking, {"start", "end"} or persisted {"startTime", "endTime"}
    - Malformed entries are skipped with a warning
    - end at or before start (persisted single-slot bookings) → one grid step
    """
    intervals: list[tuple[int, int]] = []

    for booking in bookings or ():
        if isinstance(booking, Booking):
            raw_start, raw_end = booking.start, booking.end
        elif isinstance(booking, Mapping):
            raw_start = booking.get("start", booking.get("startTime"))
            raw_end = booking.get("end", booking.get("endTime"))
        else:
            logger.warning("Skipping booking of unsupported type %s", type(booking).__name__)
            continue

        start = parse_minutes(raw_start)
        end = parse_minutes(raw_end)
        if start is None or end is None:
            logger.warning("Skipping malformed booking %r-%r", raw_start, raw_end)
            continue

        if end <= start:
            end = start + step_minutes

        intervals.append((start, end))

    return intervals


def _grid_step(slot_grid: list[Slot]) -> int:
    if not slot_grid:
        return 0
    first = slot_grid[0]
    return first.end_min - first.start_min
