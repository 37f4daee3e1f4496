# dental_booking/app/routers/slots.py
"""
Slots API endpoints.

Level 1: POST /slots/grid   - Slot grid for working hours
Level 2: POST /slots/day    - Per-slot render state for a picker
         POST /slots/select - Commit a run starting at a slot

Stateless: every request carries the full picker input. Bookings are
fetched by the caller.
"""

from datetime import datetime

from fastapi import APIRouter

from ..schemas.slots import (
    PickerDayResponse,
    PickerRequest,
    SlotRead,
    SlotRow,
    SlotSelectRequest,
    SlotSelectResponse,
    SlotsGridRequest,
    SlotsGridResponse,
)
from ..services.slots import (
    SlotPicker,
    build_day_grid,
    build_picker,
    get_booking_config,
)

router = APIRouter(prefix="/slots", tags=["slots"])


@router.post("/grid", response_model=SlotsGridResponse)
def get_slots_grid(data: SlotsGridRequest):
    """Get the slot grid for working hours (Level 1)."""
    config = get_booking_config().with_step(data.granularity)
    raw = data.working_hours.model_dump() if data.working_hours else None
    working_hours, slots = build_day_grid(raw, config)

    return SlotsGridResponse(
        start=working_hours.start,
        end=working_hours.end,
        granularity=config.slot_step_minutes,
        total_slots=len(slots),
        slots=[SlotRead.model_validate(slot) for slot in slots],
    )


@router.post("/day", response_model=PickerDayResponse)
def get_slots_day(data: PickerRequest):
    """Get render state of every slot for a picker (Level 2)."""
    picker = _picker_from_request(data)
    view = picker.view()

    return PickerDayResponse(
        date=data.target_date or (data.now or datetime.now()).date(),
        slots_needed=view.slots_needed,
        has_slots=view.has_slots,
        hint=view.hint,
        selection_label=view.selection_label,
        value=picker.value,
        free_starts=view.free_starts,
        slots=[SlotRow.model_validate(row) for row in view.slots],
    )


@router.post("/select", response_model=SlotSelectResponse)
def select_slot(data: SlotSelectRequest):
    """Click on start_index: commit its run or report why it was ignored."""
    picker = _picker_from_request(data)
    availability = picker.availability

    selection = picker.click(data.start_index)
    if selection is None:
        run = availability.candidate_run(data.start_index)
        return SlotSelectResponse(
            committed=False,
            slot_state=availability.state(data.start_index),
            reason=run.reason,
        )

    return SlotSelectResponse(
        committed=True,
        fallback=selection.fallback,
        value=picker.value,
        run_indexes=list(selection.indexes),
        slot_state=availability.state(data.start_index),
    )


def _picker_from_request(data: PickerRequest) -> SlotPicker:
    return build_picker(
        data.call_site,
        working_hours=data.working_hours.model_dump() if data.working_hours else None,
        bookings=[booking.model_dump() for booking in data.bookings],
        duration=data.service_duration,
        buffer=data.buffer_time,
        granularity=data.granularity,
        viewed_date=data.target_date,
        is_disabled=data.is_disabled,
        unavailable=data.unavailable,
        current_selection=data.current_slots,
        original_date=data.original_date,
        now=data.now,
    )
