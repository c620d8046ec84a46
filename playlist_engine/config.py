"""
Configuration settings for the playlist engine tooling.

Uses Pydantic Settings for environment variable management with .env file support.
The engine itself takes its adaptive settings per course; these settings only
drive the session store and the developer CLI.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from playlist_engine.core.models import AdaptiveMode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PLAYLIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Persistence
    # ========================================
    session_dir: Path = Field(
        default=Path.home() / ".playlist" / "sessions",
        description="Directory for saved module sessions (one JSON file each)",
    )

    # ========================================
    # Engine defaults
    # ========================================
    default_mode: AdaptiveMode = Field(
        default=AdaptiveMode.OFF,
        description="Adaptive mode used when a course does not configure one",
    )
    free_navigation: bool = Field(
        default=False,
        description="Allow direct navigation past unresolved gates (instructor/review mode)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="Log level for the CLI sink",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
