# dental_booking/app/services/slots/__init__.py
"""
Slots calculation module.

Level 1: Slot grid from working hours (calculator)
Level 2: Per-slot availability and candidate runs (availability)
Interaction: hover preview / click commit (selection, picker)
"""

from .config import BookingConfig, get_booking_config
from .domain import (
    Booking,
    CandidateRun,
    RunRejection,
    Selection,
    ServiceRequirement,
    Slot,
    SlotState,
    WorkingHours,
)
from .timefmt import TimeStyle, format_from_minutes, normalize_to_minutes, normalize_time, parse_minutes
from .calculator import build_slot_grid, build_day_grid, normalize_working_hours
from .availability import Availability, past_cutoff, resolve_states
from .encoding import Encoding, decode_selection, encode_selection
from .selection import PickerPhase, PickerState, SelectionController
from .picker import CallSite, PickerConfig, PickerView, SlotPicker, SlotView, build_picker

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "Booking",
    "CandidateRun",
    "RunRejection",
    "Selection",
    "ServiceRequirement",
    "Slot",
    "SlotState",
    "WorkingHours",
    "TimeStyle",
    "format_from_minutes",
    "normalize_to_minutes",
    "normalize_time",
    "parse_minutes",
    "build_slot_grid",
    "build_day_grid",
    "normalize_working_hours",
    "Availability",
    "past_cutoff",
    "resolve_states",
    "Encoding",
    "decode_selection",
    "encode_selection",
    "PickerPhase",
    "PickerState",
    "SelectionController",
    "CallSite",
    "PickerConfig",
    "PickerView",
    "SlotPicker",
    "SlotView",
    "build_picker",
]
