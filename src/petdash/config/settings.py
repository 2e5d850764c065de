"""Configuration management for petdash using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AIServiceSettings(BaseSettings):
    """Backend AI endpoints (tips, status, reminders)."""

    model_config = SettingsConfigDict(env_prefix="AI_", env_file=".env", extra="ignore")

    base_url: str = "http://localhost:3000"
    access_token: SecretStr = SecretStr("")
    # Requests can queue behind the backend's rate limiter for over a minute
    timeout_seconds: float = 180.0
    max_retries: int = 0


class CalendarSettings(BaseSettings):
    """Pet calendar export settings."""

    model_config = SettingsConfigDict(env_prefix="CALENDAR_", env_file=".env", extra="ignore")

    events_file: Path = Path("~/.config/petdash/calendar.yaml")
    lookahead_days: int = 365
    authorized: bool = True


class RefreshSettings(BaseSettings):
    """Background refresh settings."""

    model_config = SettingsConfigDict(env_prefix="REFRESH_", env_file=".env", extra="ignore")

    interval_seconds: int = 3600
    prune_expired_reminders: bool = True


class DashboardSettings(BaseSettings):
    """Home dashboard presentation rules."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_", env_file=".env", extra="ignore")

    generic_error: str = "Couldn't load AI insights right now. Tap to retry."
    upcoming_window_days: int = 7
    calendar_reminder_limit: int = 3


class Settings(BaseSettings):
    """Main petdash settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # General
    environment: Literal["development", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    timezone: str = "UTC"
    pets_file: Path = Field(default=Path("~/.config/petdash/pets.yaml"), alias="PETS_FILE")

    # Sub-settings
    ai: AIServiceSettings = Field(default_factory=AIServiceSettings)
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    refresh: RefreshSettings = Field(default_factory=RefreshSettings)
    dashboard: DashboardSettings = Field(default_factory=DashboardSettings)


# Global settings instance
settings = Settings()
