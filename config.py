"""
Configuration settings for the sprout practice trainer.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    state_db_path: Path = Field(
        default=Path.home() / ".sprout" / "state.db",
        description="SQLite file holding tracker snapshots and learner levels",
    )
    catalog_path: Path = Field(
        default=Path("catalog"),
        description="Catalog JSON file, or a directory of catalog JSON files",
    )

    # ========================================
    # Practice Sessions
    # ========================================
    default_learner_id: str = Field(
        default="learner",
        description="Learner used when --learner is not given",
    )
    default_session_size: int = Field(
        default=12,
        ge=1,
        description="Maximum items per practice session",
    )
    include_revision_words: bool = Field(
        default=False,
        description="Fill spare session slots with mastered items out of cooldown",
    )
    guidance_cache_size: int = Field(
        default=256,
        ge=1,
        description="Entries kept in the parent guidance cache",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Minimum level written to stderr",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional rotating log file",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
