# dental_booking/app/services/slots/domain.py
"""
Value types of the slot engine.

All times are clinic-local, single day. Types carry "HH:MM" strings for
the outside world and expose minutes since midnight for calculations.
"""

from dataclasses import dataclass, field
from enum import Enum
from math import ceil, isfinite

from .timefmt import TimeStyle, format_from_minutes, normalize_to_minutes, parse_minutes


@dataclass(frozen=True)
class WorkingHours:
    """Clinic opening interval for one day, 24-hour "HH:MM"."""
    start: str
    end: str

    @property
    def start_min(self) -> int:
        return normalize_to_minutes(self.start)

    @property
    def end_min(self) -> int:
        return normalize_to_minutes(self.end, "17:00")


@dataclass(frozen=True)
class Slot:
    """
    One grid cell.

    Attributes:
        index: 1-based, dense across the grid
        start: "HH:MM"
        end: "HH:MM"
        code: "09:00 AM-09:30 AM" (external code splits on "|" and "-")
        description: same label, shown on the button
    """
    index: int
    start: str
    end: str
    code: str
    description: str

    @property
    def start_min(self) -> int:
        return parse_minutes(self.start)

    @property
    def end_min(self) -> int:
        return parse_minutes(self.end)

    @property
    def token(self) -> str:
        """Token-list encoding of this slot: "3|09:00 AM-09:30 AM"."""
        return f"{self.index}|{self.code}"


@dataclass(frozen=True)
class Booking:
    """Already reserved interval [start, end) on the viewed day."""
    start: str
    end: str


@dataclass(frozen=True)
class ServiceRequirement:
    """
    Requested treatment.

    buffer_minutes is carried for wall-clock padding only; it does not
    change slots_needed.
    """
    duration_minutes: int
    buffer_minutes: int = 0

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {self.duration_minutes}")
        if self.buffer_minutes < 0:
            raise ValueError(f"buffer_minutes must be >= 0, got {self.buffer_minutes}")

    @classmethod
    def from_raw(
        cls,
        duration: int | float | str | None,
        buffer: int | float | str | None = 0,
        default_duration: int = 30,
    ) -> "ServiceRequirement":
        """Build from loosely typed form values, degrading bad input to defaults."""
        duration_min = _to_int(duration)
        if duration_min is None or duration_min <= 0:
            duration_min = default_duration
        buffer_min = _to_int(buffer)
        if buffer_min is None or buffer_min < 0:
            buffer_min = 0
        return cls(duration_minutes=duration_min, buffer_minutes=buffer_min)

    def slots_needed(self, granularity_minutes: int) -> int:
        """Number of contiguous grid slots the treatment consumes."""
        return ceil(self.duration_minutes / granularity_minutes)


class SlotState(str, Enum):
    FREE = "free"
    OCCUPIED = "occupied"
    PAST = "past"
    UNAVAILABLE = "unavailable"  # marked unavailable by the caller
    BLOCKED = "blocked"          # display only: free, but its run is illegal


class RunRejection(str, Enum):
    """Why a candidate run is illegal."""
    BOUNDARY_EXCEEDED = "boundary_exceeded"
    GAP_IN_RANGE = "gap_in_range"
    OCCUPIED_OR_PAST_IN_RANGE = "occupied_or_past_in_range"


@dataclass(frozen=True)
class CandidateRun:
    """
    Slots that would be reserved when starting at start_index.

    legal=False → run_indexes is empty and reason is set.
    uniform=False on a legal run → some slot in it is UNAVAILABLE,
    a click falls back to the single clicked slot.
    """
    start_index: int
    run_indexes: tuple[int, ...] = ()
    legal: bool = False
    uniform: bool = False
    reason: RunRejection | None = None


@dataclass(frozen=True)
class Selection:
    """Committed, contiguous run of slots bound to the form field."""
    slots: tuple[Slot, ...]
    fallback: bool = field(default=False, compare=False)

    @property
    def indexes(self) -> tuple[int, ...]:
        return tuple(slot.index for slot in self.slots)

    @property
    def start_time(self) -> str:
        return self.slots[0].start

    @property
    def end_time(self) -> str:
        return self.slots[-1].end

    def __len__(self) -> int:
        return len(self.slots)

    def __contains__(self, index: int) -> bool:
        return index in self.indexes

    def duration_label(self) -> str:
        """ "9:00 AM - 10:30 AM" """
        start = format_from_minutes(self.slots[0].start_min, TimeStyle.H12_SHORT)
        end = format_from_minutes(self.slots[-1].end_min, TimeStyle.H12_SHORT)
        return f"{start} - {end}"


def _to_int(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not isfinite(number):
        return None
    return int(number)
