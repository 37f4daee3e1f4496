"""Test slot states and candidate runs."""
import logging
from datetime import date, datetime

import pytest

from dental_booking.app.services.slots import (
    Booking,
    RunRejection,
    SlotState,
    WorkingHours,
    build_slot_grid,
    past_cutoff,
    resolve_states,
)
from dental_booking.app.services.slots.timefmt import format_from_minutes


class TestSlotStates:
    """Per-slot state: occupied → past → unavailable → free."""

    def test_booked_slot_is_occupied(self, hour_grid):
        availability = resolve_states(hour_grid, [Booking("09:00", "09:30")], None, 1)

        assert availability.state(1) == SlotState.OCCUPIED
        assert availability.state(2) == SlotState.FREE

    def test_touching_endpoints_do_not_overlap(self, hour_grid):
        availability = resolve_states(hour_grid, [Booking("09:30", "10:00")], None, 1)

        assert availability.state(1) == SlotState.FREE
        assert availability.state(2) == SlotState.OCCUPIED

    def test_partial_overlap_occupies_both_slots(self, hour_grid):
        availability = resolve_states(hour_grid, [Booking("09:15", "09:45")], None, 1)

        assert availability.state(1) == SlotState.OCCUPIED
        assert availability.state(2) == SlotState.OCCUPIED

    @pytest.mark.parametrize("bs,be,ss,se", [
        (540, 570, 540, 570),
        (500, 545, 540, 570),
        (565, 600, 540, 570),
        (570, 600, 540, 570),
        (480, 540, 540, 570),
        (480, 600, 540, 570),
    ])
    def test_overlap_matches_half_open_rule(self, bs, be, ss, se):
        grid = build_slot_grid(WorkingHours(format_from_minutes(ss), format_from_minutes(se)), se - ss)
        booking = Booking(format_from_minutes(bs), format_from_minutes(be))

        availability = resolve_states(grid, [booking], None, 1)

        expected = bs < se and be > ss
        assert (availability.state(1) == SlotState.OCCUPIED) is expected

    def test_persisted_booking_keys(self, hour_grid):
        availability = resolve_states(hour_grid, [{"startTime": "09:30", "endTime": "10:00"}], None, 1)

        assert availability.state(2) == SlotState.OCCUPIED

    def test_zero_length_booking_occupies_one_step(self, morning_grid):
        availability = resolve_states(morning_grid, [Booking("09:30", "09:30")], None, 1)

        assert [availability.state(i) for i in (1, 2, 3)] == [
            SlotState.FREE, SlotState.OCCUPIED, SlotState.FREE,
        ]

    def test_malformed_booking_is_skipped(self, hour_grid, caplog):
        with caplog.at_level(logging.WARNING):
            availability = resolve_states(hour_grid, [{"start": "soon", "end": "10:00"}], None, 1)

        assert availability.state(1) == SlotState.FREE
        assert "malformed booking" in caplog.text

    def test_slots_at_or_before_now_are_past(self, morning_grid):
        cutoff = past_cutoff(date(2026, 10, 17), datetime(2026, 10, 17, 9, 30))

        availability = resolve_states(morning_grid, [], cutoff, 1)

        assert availability.state(1) == SlotState.PAST
        assert availability.state(2) == SlotState.PAST
        assert availability.state(3) == SlotState.FREE

    def test_slot_starting_after_now_is_free(self, morning_grid):
        cutoff = past_cutoff(date(2026, 10, 17), datetime(2026, 10, 17, 8, 59, 59))

        assert resolve_states(morning_grid, [], cutoff, 1).state(1) == SlotState.FREE

    def test_future_date_is_never_past(self, morning_grid):
        cutoff = past_cutoff(date(2026, 10, 18), datetime(2026, 10, 17, 23, 59))

        assert cutoff is None
        assert resolve_states(morning_grid, [], cutoff, 1).state(1) == SlotState.FREE

    def test_occupied_wins_over_past(self, morning_grid):
        cutoff = past_cutoff(None, datetime(2026, 10, 17, 10, 0))

        availability = resolve_states(morning_grid, [Booking("09:00", "09:30")], cutoff, 1)

        assert availability.state(1) == SlotState.OCCUPIED
        assert availability.state(2) == SlotState.PAST

    def test_unavailable_slots(self, morning_grid):
        availability = resolve_states(morning_grid, [Booking("09:00", "09:30")], None, 1, unavailable={1, 3})

        assert availability.state(1) == SlotState.OCCUPIED
        assert availability.state(3) == SlotState.UNAVAILABLE

    def test_same_inputs_same_states(self, morning_grid):
        bookings = [Booking("09:30", "10:00")]

        first = resolve_states(morning_grid, bookings, 600, 2)
        second = resolve_states(morning_grid, bookings, 600, 2)

        assert first.states == second.states
        assert [first.candidate_run(i) for i in range(1, 5)] == [second.candidate_run(i) for i in range(1, 5)]


class TestPastCutoff:
    """Past rule is scoped to the viewed date."""

    def test_today(self, now, today):
        assert past_cutoff(today, now) == 12 * 60

    def test_no_date_means_today(self, now):
        assert past_cutoff(None, now) == 12 * 60

    def test_datetime_is_reduced_to_date(self, now):
        assert past_cutoff(datetime(2026, 10, 18, 8, 0), now) is None

    def test_earlier_date_is_all_past(self, now):
        assert past_cutoff(date(2026, 10, 16), now) == 24 * 60


class TestCandidateRun:
    """Contiguous run legality."""

    def test_run_on_occupied_slot_is_illegal(self, hour_grid):
        availability = resolve_states(hour_grid, [Booking("09:00", "09:30")], None, 1)

        run = availability.candidate_run(1)
        assert not run.legal
        assert run.run_indexes == ()
        assert run.reason == RunRejection.OCCUPIED_OR_PAST_IN_RANGE

        assert availability.candidate_run(2).legal
        assert availability.candidate_run(2).run_indexes == (2,)

    def test_run_past_last_slot_is_illegal(self, hour_grid):
        availability = resolve_states(hour_grid, [Booking("09:00", "09:30")], None, 2)

        run = availability.candidate_run(2)
        assert not run.legal
        assert run.reason == RunRejection.BOUNDARY_EXCEEDED

    def test_run_covers_slots_needed(self, morning_grid):
        availability = resolve_states(morning_grid, [], None, 3)

        run = availability.candidate_run(2)
        assert run.legal and run.uniform
        assert run.run_indexes == (2, 3, 4)

    def test_run_through_booking_is_illegal(self, morning_grid):
        availability = resolve_states(morning_grid, [Booking("10:00", "10:30")], None, 2)

        assert availability.candidate_run(2).reason == RunRejection.OCCUPIED_OR_PAST_IN_RANGE
        assert availability.candidate_run(1).legal

    def test_run_through_past_slot_is_illegal(self, morning_grid):
        availability = resolve_states(morning_grid, [], 540, 2)

        assert availability.candidate_run(1).reason == RunRejection.OCCUPIED_OR_PAST_IN_RANGE
        assert availability.candidate_run(2).legal

    def test_index_outside_grid_is_gap(self, morning_grid):
        availability = resolve_states(morning_grid, [], None, 1)

        assert availability.candidate_run(0).reason == RunRejection.GAP_IN_RANGE

    def test_unavailable_slot_makes_run_non_uniform(self, morning_grid):
        availability = resolve_states(morning_grid, [], None, 2, unavailable={3})

        run = availability.candidate_run(2)
        assert run.legal
        assert not run.uniform
        assert run.run_indexes == (2, 3)

    def test_empty_grid(self):
        availability = resolve_states([], [Booking("09:00", "10:00")], None, 1)

        assert availability.last_index == 0
        assert availability.candidate_run(1).reason == RunRejection.BOUNDARY_EXCEEDED

    def test_fewer_bookings_never_break_a_legal_run(self, morning_grid):
        bookings = [Booking("09:00", "09:30"), Booking("10:30", "11:00"), Booking("10:00", "10:15")]

        for needed in (1, 2, 3):
            full = resolve_states(morning_grid, bookings, None, needed)
            for subset_size in range(len(bookings)):
                subset = resolve_states(morning_grid, bookings[:subset_size], None, needed)
                for index in range(1, 5):
                    if full.candidate_run(index).legal:
                        assert subset.candidate_run(index).legal


class TestDisplayState:
    """Free slots that cannot start a run render as blocked."""

    def test_tail_slot_blocked(self, hour_grid):
        availability = resolve_states(hour_grid, [], None, 2)

        assert availability.display_state(1) == SlotState.FREE
        assert availability.display_state(2) == SlotState.BLOCKED

    def test_free_start_indexes(self, morning_grid):
        availability = resolve_states(morning_grid, [Booking("10:00", "10:30")], None, 2, unavailable={1})

        assert availability.free_start_indexes() == []

    def test_free_start_indexes_without_conflicts(self, morning_grid):
        availability = resolve_states(morning_grid, [], None, 2)

        assert availability.free_start_indexes() == [1, 2, 3]
