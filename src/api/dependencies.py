"""FastAPI dependencies for settings and the level requirement table."""

from __future__ import annotations

from functools import lru_cache

from config import Settings, get_settings
from src.core.level_table import LevelRequirementTable, load_level_table


@lru_cache(maxsize=4)
def _cached_level_table(path: str | None) -> LevelRequirementTable:
    return load_level_table(path)


def settings_dependency() -> Settings:
    return get_settings()


def level_table_dependency() -> LevelRequirementTable:
    """Level table for the configured path, loaded once per path."""
    return _cached_level_table(get_settings().level_requirements_path)
