"""
Configuration settings for the fluentpath engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.level_table import LevelRequirementTable, load_level_table


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Assessment
    # ========================================
    level_requirements_path: str | None = Field(
        default=None,
        description="JSON file overriding the built-in level requirement table",
    )
    correct_accuracy_threshold: float = Field(
        default=50.0,
        ge=0.0,
        le=100.0,
        description="Accuracy at which a graded record counts as correct",
    )
    trend_window: int = Field(
        default=3,
        ge=1,
        description="Graded records per group when detecting the recent trend",
    )
    trend_threshold: float = Field(
        default=2.0,
        ge=0.0,
        description="Accuracy point difference that counts as an up/down trend",
    )

    # ========================================
    # Wordbook
    # ========================================
    review_queue_limit: int = Field(
        default=20,
        ge=1,
        description="Maximum words shown in a review queue",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8100,
        description="API server port",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper() if isinstance(value, str) else value

    def get_level_table(self) -> LevelRequirementTable:
        """Level table from ``level_requirements_path``, else the defaults."""
        return load_level_table(self.level_requirements_path)

    def get_assessment_config(self) -> dict[str, float | int]:
        """Get assessment tuning parameters as a dictionary."""
        return {
            "correct_threshold": self.correct_accuracy_threshold,
            "trend_window": self.trend_window,
            "trend_threshold": self.trend_threshold,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
