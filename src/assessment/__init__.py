"""
Assessment Module - CEFR placement and upgrade decisions.

Pipeline (one direction only):
    ActivityRecords -> aggregator -> evaluator -> upgrade

Components:
- aggregator: accuracy/time/streak statistics over a time window
- evaluator: per-module CEFR level, next-level progress and trend
- upgrade: overall level, upgrade decision and recommendations
- collector: builds ActivityRecords from raw practice results
"""

from src.assessment.aggregator import (
    AggregateResult,
    aggregate,
    aggregate_by_module,
    calculate_streak,
)
from src.assessment.evaluator import (
    ModuleAssessment,
    NextLevelRequirement,
    detect_trend,
    evaluate,
    evaluate_all,
)
from src.assessment.upgrade import (
    LevelRequirementStatus,
    LevelUpgrade,
    ProficiencyAssessment,
    decide,
    upgrade_recommendations,
)

__all__ = [
    # Aggregator
    "AggregateResult",
    "aggregate",
    "aggregate_by_module",
    "calculate_streak",
    # Evaluator
    "ModuleAssessment",
    "NextLevelRequirement",
    "detect_trend",
    "evaluate",
    "evaluate_all",
    # Upgrade
    "LevelRequirementStatus",
    "LevelUpgrade",
    "ProficiencyAssessment",
    "decide",
    "upgrade_recommendations",
]
