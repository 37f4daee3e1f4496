"""Shared test fixtures."""
import pytest
from datetime import datetime, timedelta

from dental_booking.app.services.slots import BookingConfig, WorkingHours, build_slot_grid


@pytest.fixture
def booking_config() -> BookingConfig:
    """Default config: 30 min grid, 09:00-17:00 fallback."""
    return BookingConfig()


@pytest.fixture
def now() -> datetime:
    """Fixed "now": noon on the viewed day."""
    return datetime(2026, 10, 17, 12, 0)


@pytest.fixture
def today(now):
    return now.date()


@pytest.fixture
def tomorrow(now):
    return now.date() + timedelta(days=1)


@pytest.fixture
def morning_grid():
    """09:00-11:00 at 30 min → 4 slots."""
    return build_slot_grid(WorkingHours(start="09:00", end="11:00"), 30)


@pytest.fixture
def hour_grid():
    """09:00-10:00 at 30 min → 2 slots."""
    return build_slot_grid(WorkingHours(start="09:00", end="10:00"), 30)
