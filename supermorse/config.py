"""
Configuration settings for the SuperMorse drill trainer.

Uses Pydantic Settings for environment variable management with .env file support.
Every field can be overridden with a ``SUPERMORSE_`` prefixed variable, e.g.
``SUPERMORSE_SESSION_MINUTES=20``.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SUPERMORSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".supermorse",
        description="Directory holding the local progress database",
    )
    state_db_name: str = Field(
        default="state.db",
        description="SQLite file name for saved progress",
    )

    # ========================================
    # Drill Defaults
    # ========================================
    default_curriculum: str = Field(
        default="international",
        description="Curriculum used when nothing has been saved yet",
    )
    default_wpm: int = Field(
        default=12,
        description="Initial drill speed in words per minute",
    )
    farnsworth_spacing: bool = Field(
        default=True,
        description="Stretch inter-character gaps while keeping character speed",
    )
    mastery_threshold: float = Field(
        default=0.9,
        description="Smoothed accuracy every known symbol needs before a new one is introduced",
    )
    practice_length: int = Field(
        default=5,
        description="Symbols per practice round",
    )

    # ========================================
    # Session Timing
    # ========================================
    session_minutes: float = Field(
        default=30,
        description="Length of a drill session",
    )
    break_minutes: float = Field(
        default=60,
        description="Recommended rest after a session",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="Loguru level for console output",
    )

    @property
    def state_db_path(self) -> Path:
        """Full path of the progress database."""
        return Path(self.data_dir).expanduser() / self.state_db_name

    def get_drill_defaults(self) -> dict[str, object]:
        """Get drill setting defaults as a dictionary (durations in seconds)."""
        return {
            "curriculum": self.default_curriculum,
            "wpm": self.default_wpm,
            "farnsworth_spacing": self.farnsworth_spacing,
            "mastery_threshold": self.mastery_threshold,
            "session_duration": self.session_minutes * 60,
            "break_duration": self.break_minutes * 60,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
