# dental_booking/app/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date, datetime
from pydantic import BaseModel, Field

from ..services.slots import CallSite, RunRejection, SlotState


class WorkingHoursIn(BaseModel):
    """Clinic working hours, 12h or 24h strings."""
    from_time: str | None = None
    to_time: str | None = None

    model_config = {"from_attributes": True}


class BookingIn(BaseModel):
    """Existing booking on the viewed date, "HH:MM"."""
    start: str
    end: str

    model_config = {"from_attributes": True}


class SlotRead(BaseModel):
    index: int
    start: str  # "HH:MM"
    end: str    # "HH:MM"
    code: str   # "09:00 AM-09:30 AM"
    description: str

    model_config = {"from_attributes": True}


class SlotsGridRequest(BaseModel):
    """Request for the raw grid of a day."""
    working_hours: WorkingHoursIn | None = None
    granularity: int | None = Field(default=None, gt=0, le=1440)

    model_config = {"from_attributes": True}


class SlotsGridResponse(BaseModel):
    """Grid for normalized working hours (Level 1)."""
    start: str
    end: str
    granularity: int
    total_slots: int
    slots: list[SlotRead]

    model_config = {"from_attributes": True}


class PickerRequest(BaseModel):
    """Everything a picker needs to resolve a day (Level 2)."""
    call_site: CallSite = CallSite.STAFF
    working_hours: WorkingHoursIn | None = None
    bookings: list[BookingIn] = []
    service_duration: int | None = Field(default=None, description="Treatment duration in minutes")
    buffer_time: int = Field(default=0, description="Buffer in minutes (does not change slots_needed)")
    granularity: int | None = Field(default=None, gt=0, le=1440)
    target_date: date | None = Field(default=None, alias="date")  # None = today
    unavailable: list[int] = []
    current_slots: list[str] | dict[str, str] | None = Field(
        default=None,
        description="Persisted selection to preselect: token list or {startTime, endTime}",
    )
    original_date: date | None = None
    is_disabled: bool = False
    now: datetime | None = Field(default=None, description="Clock for the past-slot rule, None = server time")

    model_config = {"from_attributes": True, "populate_by_name": True}


class SlotRow(BaseModel):
    """Render state of one slot."""
    index: int
    code: str
    description: str
    start: str
    end: str
    state: SlotState
    enabled: bool
    selected: bool
    group_first: bool = False
    group_last: bool = False

    model_config = {"from_attributes": True}


class PickerDayResponse(BaseModel):
    date: date
    slots_needed: int
    has_slots: bool
    hint: str
    selection_label: str | None = None
    value: list[str] | dict[str, str] | None = None
    free_starts: list[int] = []
    slots: list[SlotRow]

    model_config = {"from_attributes": True}


class SlotSelectRequest(PickerRequest):
    start_index: int


class SlotSelectResponse(BaseModel):
    """Result of a click on start_index."""
    committed: bool
    fallback: bool = False
    value: list[str] | dict[str, str] | None = None
    run_indexes: list[int] = []
    slot_state: SlotState | None = None
    reason: RunRejection | None = None

    model_config = {"from_attributes": True}
