from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DISPATCHX_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = "DispatchX"
    debug: bool = False
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    # Booking capacity and look-ahead windows
    slot_capacity_per_day: int = Field(2, gt=0)
    emergency_slot_capacity_per_day: int = Field(3, gt=0)
    workload_horizon_days: int = Field(30, gt=0)
    availability_lookahead_days: int = Field(60, gt=0)
    booking_max_days_ahead: int = Field(365, gt=0)
    booking_notes_max_length: int = Field(500, gt=0)
    completion_notes_max_length: int = Field(1000, gt=0)

    # Roster thresholds
    light_workload_threshold: int = Field(2, ge=0)
    overloaded_workload_threshold: int = Field(5, ge=0)
    max_recommendations: int = Field(3, gt=0)

    # Worker-to-request scoring weights
    score_base: int = 100
    score_exact_match: int = 200
    score_general_fallback: int = 100
    score_availability: int = 50
    score_workload_max: int = 30
    score_workload_step: int = 5
    score_emergency: int = 50

    @model_validator(mode="after")
    def check_capacities(self) -> "Settings":
        """Emergency bookings may stretch a day, never shrink it."""
        if self.emergency_slot_capacity_per_day < self.slot_capacity_per_day:
            raise ValueError("emergency_slot_capacity_per_day must be >= slot_capacity_per_day")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
