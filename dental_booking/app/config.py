# dental_booking/app/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    # Slot picker defaults
    slot_step_minutes: int = 30
    default_work_start: str = "09:00"
    default_work_end: str = "17:00"
    default_service_minutes: int = 30

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_log_level(self) -> str:
        level = self.log_level.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return "INFO"
        return level


settings = Settings()
