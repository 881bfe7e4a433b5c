"""
Core Module - Shared domain vocabulary.

Canonical types used by every engine component:
- proficiency: CEFRLevel, SkillModule, ActivityModule, Trend
- level_table: LevelRequirementTable and the default thresholds
- records: ActivityRecord, TimeWindow

Design Principle:
The assessment, wordbook and scoring packages import from src/core/
rather than redefining levels or modules.
"""

from src.core.level_table import (
    DEFAULT_LEVEL_TABLE,
    LevelRequirement,
    LevelRequirementTable,
    LevelTableConfigError,
    load_level_table,
)
from src.core.proficiency import ActivityModule, CEFRLevel, SkillModule, Trend
from src.core.records import ActivityRecord, TimeWindow

__all__ = [
    # Proficiency
    "CEFRLevel",
    "SkillModule",
    "ActivityModule",
    "Trend",
    # Level table
    "LevelRequirement",
    "LevelRequirementTable",
    "LevelTableConfigError",
    "DEFAULT_LEVEL_TABLE",
    "load_level_table",
    # Records
    "ActivityRecord",
    "TimeWindow",
]
