"""Application configuration."""

import os

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    admin_token: str
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    leaderboard_table: str = "leaderboard_entries"
    award_interval_seconds: float = 15.0
    award_min_points: int = 40
    award_max_points: int = 79
    exercise_min_points: int = 10
    exercise_max_points: int = 79
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_point_ranges(self) -> "Settings":
        if self.award_interval_seconds <= 0:
            raise ValueError("award_interval_seconds must be positive")
        _check_range("award", self.award_min_points, self.award_max_points)
        _check_range("exercise", self.exercise_min_points, self.exercise_max_points)
        return self

    @property
    def uses_supabase(self) -> bool:
        """Return True when Supabase credentials are configured."""
        return bool(self.supabase_url and self.supabase_service_key)


def _check_range(name: str, low: int, high: int) -> None:
    if low < 0:
        raise ValueError(f"{name}_min_points must not be negative")
    if low > high:
        raise ValueError(f"{name}_min_points must not exceed {name}_max_points")
