# dental_booking/app/services/slots/selection.py
"""
Selection controller: hover preview and click commit for one picker.

States:
    IDLE ──pointer_enter(legal start)──▶ PREVIEWING
    PREVIEWING ──pointer_leave──▶ IDLE
    any ──click(legal start)──▶ value replaced, on_change(encoded value)

Rules:
- A click always re-checks the run against the current availability
  (a preview may be stale after bookings were refetched).
- An illegal click is ignored silently: no state change, no value emitted.
- A legal run containing a slot the caller marked unavailable commits
  only the clicked slot (single-slot fallback).
- One commit replaces the whole value; there is no toggle or multi-range.
- is_disabled short-circuits every transition.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum

from .availability import Availability
from .domain import Selection
from .encoding import Encoding, empty_value, encode_selection

logger = logging.getLogger(__name__)


class PickerPhase(str, Enum):
    IDLE = "idle"
    PREVIEWING = "previewing"


@dataclass(frozen=True)
class PickerState:
    """Read-only view state of one picker instance."""
    phase: PickerPhase = PickerPhase.IDLE
    hovered: int | None = None
    preview: tuple[int, ...] = ()
    value: Selection | None = None


class SelectionController:
    """Per-picker interaction state. Never touches persistence."""

    def __init__(
        self,
        availability: Availability,
        encoding: Encoding = Encoding.TOKENS,
        on_change: Callable | None = None,
        is_disabled: bool = False,
        initial: Selection | None = None,
    ):
        self.availability = availability
        self.encoding = encoding
        self.on_change = on_change
        self.is_disabled = is_disabled
        self._state = PickerState(value=initial)

    @property
    def state(self) -> PickerState:
        return self._state

    @property
    def selection(self) -> Selection | None:
        return self._state.value

    @property
    def value(self) -> list[str] | dict | None:
        """Committed selection in the field encoding."""
        return encode_selection(self._state.value, self.encoding)

    def is_enabled(self, index: int) -> bool:
        return not self.is_disabled and self.availability.is_free(index)

    # ── Transitions ──────────────────────────────────────────────────────

    def pointer_enter(self, index: int) -> PickerState:
        if self.is_disabled:
            return self._state

        if self.is_enabled(index):
            run = self.availability.candidate_run(index)
            if run.legal:
                self._state = replace(
                    self._state,
                    phase=PickerPhase.PREVIEWING,
                    hovered=index,
                    preview=run.run_indexes,
                )
                return self._state

        self._state = replace(self._state, phase=PickerPhase.IDLE, hovered=None, preview=())
        return self._state

    def pointer_leave(self) -> PickerState:
        if self.is_disabled:
            return self._state
        self._state = replace(self._state, phase=PickerPhase.IDLE, hovered=None, preview=())
        return self._state

    def click(self, index: int) -> Selection | None:
        """
        Commit the run starting at index.

        Returns:
            The committed Selection, or None when the click was ignored.
        """
        if self.is_disabled:
            return None

        if not self.availability.is_free(index):
            logger.debug("Ignoring click on slot %s: state %s", index, self.availability.state(index))
            return None

        run = self.availability.candidate_run(index)
        if not run.legal:
            logger.debug("Ignoring click on slot %s: %s", index, run.reason.value)
            return None

        if run.uniform:
            selection = Selection(
                slots=tuple(self.availability.slot(i) for i in run.run_indexes),
            )
        else:
            selection = Selection(slots=(self.availability.slot(index),), fallback=True)

        self._state = replace(self._state, value=selection)
        self._emit(self.value)
        return selection

    def refresh(self, availability: Availability) -> PickerState:
        """
        Swap in freshly resolved availability (bookings refetched).

        The committed value is kept as is. A preview that is no longer legal is dropped.
        """
        self.availability = availability
        hovered = self._state.hovered
        if hovered is not None:
            return self.pointer_enter(hovered)
        return self._state

    def change_context(self, availability: Availability | None = None) -> PickerState:
        """
        Viewed date or resource changed: drop preview and committed value.

        Emits the encoding's empty value so the field is cleared before
        the new bookings arrive.
        """
        if availability is not None:
            self.availability = availability
        had_value = self._state.value is not None
        self._state = PickerState()
        if had_value:
            self._emit(empty_value(self.encoding))
        return self._state

    def set_disabled(self, is_disabled: bool) -> PickerState:
        self.is_disabled = is_disabled
        if is_disabled:
            self._state = replace(self._state, phase=PickerPhase.IDLE, hovered=None, preview=())
        return self._state

    # ── Helpers ──────────────────────────────────────────────────────────

    def _emit(self, value) -> None:
        if self.on_change is not None:
            self.on_change(value)
