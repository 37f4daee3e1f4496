# dental_booking/app/services/slots/config.py
"""
Booking configuration for slots calculation.
"""

from dataclasses import dataclass
from functools import lru_cache

from .timefmt import MINUTES_PER_DAY, parse_minutes


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the slot picker.

    Attributes:
        slot_step_minutes: Grid step in minutes (observed 15 / 30)
        default_work_start: Fallback opening time when upstream hours are missing or malformed
        default_work_end: Fallback closing time
        default_service_minutes: Duration used when a treatment has none
    """
    slot_step_minutes: int = 30
    default_work_start: str = "09:00"
    default_work_end: str = "17:00"
    default_service_minutes: int = 30

    def __post_init__(self):
        """Validate configuration."""
        if not 0 < self.slot_step_minutes <= MINUTES_PER_DAY:
            raise ValueError(f"slot_step_minutes must be in 1..{MINUTES_PER_DAY}, got {self.slot_step_minutes}")
        for name in ("default_work_start", "default_work_end"):
            if parse_minutes(getattr(self, name)) is None:
                raise ValueError(f"{name} is not a valid time: {getattr(self, name)!r}")
        if self.default_service_minutes <= 0:
            raise ValueError(f"default_service_minutes must be positive, got {self.default_service_minutes}")

    def with_step(self, slot_step_minutes: int | None) -> "BookingConfig":
        """Same config with another grid step (None or non-positive keeps the current one)."""
        if not slot_step_minutes or slot_step_minutes <= 0 or slot_step_minutes == self.slot_step_minutes:
            return self
        return BookingConfig(
            slot_step_minutes=slot_step_minutes,
            default_work_start=self.default_work_start,
            default_work_end=self.default_work_end,
            default_service_minutes=self.default_service_minutes,
        )


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton), populated from settings."""
    from ...config import settings

    return BookingConfig(
        slot_step_minutes=settings.slot_step_minutes,
        default_work_start=settings.default_work_start,
        default_work_end=settings.default_work_end,
        default_service_minutes=settings.default_service_minutes,
    )
