# dental_booking/app/services/slots/picker.py
"""
Slot picker: one configuration struct shared by every appointment form.

Call sites:
- staff appointment form   → token list, may pass dentist-unavailable slots
- guest appointment form   → token list
- public booking form      → {startTime, endTime} range

Each call site only builds a PickerConfig and picks an encoding; grid,
availability and selection rules are the same everywhere.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .availability import Availability, booking_intervals, past_cutoff, resolve_states
from .calculator import build_slot_grid, normalize_working_hours
from .config import BookingConfig, get_booking_config
from .domain import Booking, Selection, ServiceRequirement, Slot, SlotState, WorkingHours
from .encoding import Encoding, decode_selection
from .selection import PickerState, SelectionController

logger = logging.getLogger(__name__)


class CallSite(str, Enum):
    STAFF = "staff"
    GUEST = "guest"
    PUBLIC = "public"


CALL_SITE_ENCODINGS: dict[CallSite, Encoding] = {
    CallSite.STAFF: Encoding.TOKENS,
    CallSite.GUEST: Encoding.TOKENS,
    CallSite.PUBLIC: Encoding.RANGE,
}


@dataclass(frozen=True)
class PickerConfig:
    """
    Everything a picker needs.

    Attributes:
        working_hours: Raw or normalized hours ({"from_time", "to_time"} accepted)
        service: Requested treatment
        bookings: Bookings on the viewed date (already day-filtered)
        granularity: Grid step in minutes, None = BookingConfig default
        viewed_date: Date being viewed, None = today
        is_disabled: Read-only picker
        unavailable: Slot indexes the caller marks unavailable
        current_selection: Persisted value to preselect (edit mode)
        original_date: Date of the appointment being edited
        encoding: Field value encoding
    """
    working_hours: WorkingHours | Mapping | None
    service: ServiceRequirement
    bookings: tuple = ()
    granularity: int | None = None
    viewed_date: date | None = None
    is_disabled: bool = False
    unavailable: frozenset[int] = field(default_factory=frozenset)
    current_selection: list | dict | str | None = None
    original_date: date | None = None
    encoding: Encoding = Encoding.TOKENS


@dataclass(frozen=True)
class SlotView:
    """One rendered slot button."""
    index: int
    code: str
    description: str
    start: str
    end: str
    state: SlotState
    enabled: bool
    selected: bool
    previewing: bool
    group_first: bool = False
    group_last: bool = False


@dataclass(frozen=True)
class PickerView:
    slots: list[SlotView]
    has_slots: bool
    slots_needed: int
    hint: str
    selection_label: str | None = None
    free_starts: list[int] = field(default_factory=list)


class SlotPicker:
    """Grid + availability + selection controller for one rendered picker."""

    def __init__(
        self,
        config: PickerConfig,
        on_change: Callable | None = None,
        now: datetime | None = None,
        booking_config: BookingConfig | None = None,
    ):
        self.booking_config = booking_config or get_booking_config()
        self.now = now
        self.config = config

        self.working_hours, self.grid = self._build_grid(config)
        initial = self._initial_selection(config)
        self.controller = SelectionController(
            self._resolve(config),
            encoding=config.encoding,
            on_change=on_change,
            is_disabled=config.is_disabled,
            initial=initial,
        )

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def step(self) -> int:
        return self.config.granularity or self.booking_config.slot_step_minutes

    @property
    def slots_needed(self) -> int:
        return self.config.service.slots_needed(self.step)

    @property
    def availability(self) -> Availability:
        return self.controller.availability

    @property
    def state(self) -> PickerState:
        return self.controller.state

    @property
    def value(self):
        return self.controller.value

    # ── Interaction ──────────────────────────────────────────────────────

    def pointer_enter(self, index: int) -> PickerState:
        return self.controller.pointer_enter(index)

    def pointer_leave(self) -> PickerState:
        return self.controller.pointer_leave()

    def click(self, index: int) -> Selection | None:
        return self.controller.click(index)

    def update(self, config: PickerConfig) -> PickerState:
        """
        Apply new inputs.

        A changed date, treatment, hours or grid step resets the selection
        (stale grid). Changed bookings or unavailable slots only re-resolve states.
        """
        previous = self.config
        self.config = config

        context_changed = (
            config.viewed_date != previous.viewed_date
            or config.service != previous.service
            or config.working_hours != previous.working_hours
            or config.granularity != previous.granularity
        )

        self.controller.set_disabled(config.is_disabled)

        if context_changed:
            self.working_hours, self.grid = self._build_grid(config)
            return self.controller.change_context(self._resolve(config))

        if config.bookings != previous.bookings or config.unavailable != previous.unavailable:
            return self.controller.refresh(self._resolve(config))

        return self.controller.state

    # ── View ─────────────────────────────────────────────────────────────

    def view(self, show_occupied: bool = True) -> PickerView:
        availability = self.availability
        state = self.controller.state
        selection = state.value
        selected = set(selection.indexes) if selection else set()

        rows = []
        for slot in self.grid:
            display = availability.display_state(slot.index)
            if not show_occupied and display == SlotState.OCCUPIED:
                continue
            rows.append(SlotView(
                index=slot.index,
                code=slot.code,
                description=slot.description,
                start=slot.start,
                end=slot.end,
                state=display,
                enabled=self.controller.is_enabled(slot.index) and display != SlotState.BLOCKED,
                selected=slot.index in selected,
                previewing=slot.index in state.preview,
                group_first=bool(selection) and slot.index == selection.indexes[0],
                group_last=bool(selection) and slot.index == selection.indexes[-1],
            ))

        return PickerView(
            slots=rows,
            has_slots=bool(self.grid),
            slots_needed=self.slots_needed,
            hint=self._hint(),
            selection_label=selection.duration_label() if selection else None,
            free_starts=[] if self.controller.is_disabled else availability.free_start_indexes(),
        )

    # ── Helpers ──────────────────────────────────────────────────────────

    def _build_grid(self, config: PickerConfig) -> tuple[WorkingHours, list[Slot]]:
        working_hours = normalize_working_hours(config.working_hours, self.booking_config)
        grid = build_slot_grid(working_hours, config.granularity or self.booking_config.slot_step_minutes)
        if not grid:
            logger.info("No slots for working hours %s-%s", working_hours.start, working_hours.end)
        return working_hours, grid

    def _initial_selection(self, config: PickerConfig) -> Selection | None:
        if config.current_selection is None:
            return None
        return decode_selection(config.current_selection, self.grid)

    def _own_selection(self, config: PickerConfig) -> Selection | None:
        """Persisted selection of the edited appointment, if it lies on the viewed date."""
        if config.current_selection is None or config.original_date is None:
            return None
        viewed = config.viewed_date or (self.now or datetime.now()).date()
        if viewed != config.original_date:
            return None
        return decode_selection(config.current_selection, self.grid)

    def _resolve(self, config: PickerConfig) -> Availability:
        bookings = _without_own_booking(config.bookings, self._own_selection(config), self.step)
        return resolve_states(
            self.grid,
            bookings,
            past_cutoff(config.viewed_date, self.now),
            self.slots_needed,
            unavailable=config.unavailable,
        )

    def _hint(self) -> str:
        if not self.grid:
            return "No slots available"
        if self.slots_needed > 1:
            return (
                f"Selecting a slot will auto-select {self.slots_needed} consecutive slots "
                f"({self.config.service.duration_minutes} minutes)"
            )
        return "Select a time slot"


def build_picker(
    call_site: CallSite,
    *,
    working_hours: WorkingHours | Mapping | None,
    bookings: Iterable[Booking | Mapping] = (),
    duration: int | float | str | None = None,
    buffer: int | float | str | None = 0,
    granularity: int | None = None,
    viewed_date: date | None = None,
    is_disabled: bool = False,
    unavailable: Iterable[int] = (),
    current_selection: list | dict | str | None = None,
    original_date: date | None = None,
    on_change: Callable | None = None,
    now: datetime | None = None,
    booking_config: BookingConfig | None = None,
) -> SlotPicker:
    """Adapter from loosely typed form values to a SlotPicker for a call site."""
    booking_config = booking_config or get_booking_config()
    config = PickerConfig(
        working_hours=working_hours,
        service=ServiceRequirement.from_raw(
            duration, buffer, default_duration=booking_config.default_service_minutes,
        ),
        bookings=tuple(bookings or ()),
        granularity=granularity,
        viewed_date=viewed_date,
        is_disabled=is_disabled,
        unavailable=frozenset(unavailable or ()),
        current_selection=current_selection,
        original_date=original_date,
        encoding=CALL_SITE_ENCODINGS[call_site],
    )
    return SlotPicker(config, on_change=on_change, now=now, booking_config=booking_config)


def _without_own_booking(bookings, own: Selection | None, step: int) -> list:
    """Drop bookings that are the edited appointment itself."""
    if own is None:
        return list(bookings)

    own_start = own.slots[0].start_min
    own_ends = {own.slots[-1].end_min, own.slots[-1].start_min}

    result = []
    for booking in bookings:
        interval = booking_intervals([booking], step)
        if interval and interval[0][0] == own_start and interval[0][1] in own_ends:
            continue
        result.append(booking)
    return result
