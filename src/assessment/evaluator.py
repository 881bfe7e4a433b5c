"""
Module Assessment Evaluator.

Maps aggregated statistics plus the level requirement table to a CEFR
level and upgrade progress for one skill module.

Level placement:
    Walk A1 -> C2. A level is met when both the accuracy and the attempt
    threshold are reached; the first unmet level stops the walk. A1 is
    the floor even when unmet.

Progress:
    progress = min(100, 100 x min(accuracy / target, attempts / minimum))
    The slower dimension bottlenecks progress toward the next level.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from loguru import logger

from src.assessment.aggregator import (
    CORRECT_ACCURACY_THRESHOLD,
    AggregateResult,
    aggregate_by_module,
)
from src.core.level_table import DEFAULT_LEVEL_TABLE, LevelRequirementTable
from src.core.proficiency import CEFRLevel, SkillModule, Trend
from src.core.records import ActivityRecord, TimeWindow

TREND_WINDOW = 3
TREND_THRESHOLD = 2.0


@dataclass(frozen=True)
class NextLevelRequirement:
    """Requirement of the level above the current one; targets are None at C2."""

    target_accuracy: float | None
    minimum_attempts: int | None
    current_progress: float  # 0-100

    def to_dict(self) -> dict:
        return {
            "target_accuracy": self.target_accuracy,
            "minimum_attempts": self.minimum_attempts,
            "current_progress": self.current_progress,
        }


@dataclass(frozen=True)
class ModuleAssessment:
    """Derived assessment for one skill module."""

    module: SkillModule
    current_level: CEFRLevel
    accuracy: float
    total_attempts: int
    correct_attempts: int
    recent_trend: Trend
    next_level_requirement: NextLevelRequirement
    next_level: CEFRLevel | None = None

    @property
    def progress(self) -> float:
        return self.next_level_requirement.current_progress

    def to_dict(self) -> dict:
        return {
            "module": self.module.value,
            "current_level": self.current_level.value,
            "accuracy": self.accuracy,
            "total_attempts": self.total_attempts,
            "correct_attempts": self.correct_attempts,
            "recent_trend": self.recent_trend.value,
            "next_level": self.next_level.value if self.next_level else None,
            "next_level_requirement": self.next_level_requirement.to_dict(),
        }


def detect_trend(
    accuracies: Sequence[float],
    window: int = TREND_WINDOW,
    threshold: float = TREND_THRESHOLD,
) -> Trend:
    """
    Compare the latest ``window`` graded accuracies with the ones before them.

    Args:
        accuracies: Graded accuracies in chronological order
        window: Size of each comparison group
        threshold: Point difference needed to call a direction

    Returns:
        Trend.STABLE when fewer than 2 x window values exist
    """
    if window <= 0 or len(accuracies) < window * 2:
        return Trend.STABLE

    recent = accuracies[-window:]
    previous = accuracies[-2 * window:-window]
    diff = sum(recent) / window - sum(previous) / window

    if diff > threshold:
        return Trend.UP
    if diff < -threshold:
        return Trend.DOWN
    return Trend.STABLE


def determine_level(
    module: SkillModule,
    accuracy: float,
    attempts: int,
    table: LevelRequirementTable = DEFAULT_LEVEL_TABLE,
) -> CEFRLevel:
    """Highest level whose requirement, and every requirement below it, is met."""
    current = CEFRLevel.lowest()
    for level in CEFRLevel:
        if not table.requirement(level, module).is_met(accuracy, attempts):
            break
        current = level
    return current


def calculate_progress(
    accuracy: float,
    attempts: int,
    target_accuracy: float,
    minimum_attempts: int,
) -> float:
    """
    Progress (0-100) toward a requirement, bottlenecked by the weaker dimension.

    A zero target or zero minimum counts as fully satisfied on that axis.
    """
    accuracy_ratio = accuracy / target_accuracy if target_accuracy > 0 else 1.0
    attempts_ratio = attempts / minimum_attempts if minimum_attempts > 0 else 1.0
    progress = 100.0 * min(accuracy_ratio, attempts_ratio)
    return max(0.0, min(100.0, progress))


def evaluate(
    module: SkillModule,
    aggregate_result: AggregateResult,
    table: LevelRequirementTable = DEFAULT_LEVEL_TABLE,
    *,
    trend_window: int = TREND_WINDOW,
    trend_threshold: float = TREND_THRESHOLD,
) -> ModuleAssessment:
    """
    Assess one module from its aggregated statistics.

    Args:
        module: Skill module being assessed
        aggregate_result: Aggregate of that module's records
        table: Level requirement table
        trend_window: Records per group for trend detection
        trend_threshold: Point difference for an up/down trend

    Returns:
        ModuleAssessment (never raises for sparse data)
    """
    module = SkillModule(module)
    accuracy = max(0.0, min(100.0, aggregate_result.average_accuracy))
    attempts = max(0, aggregate_result.total_attempts)

    current_level = determine_level(module, accuracy, attempts, table)
    next_level = current_level.next()

    if next_level is None:
        requirement = NextLevelRequirement(
            target_accuracy=None,
            minimum_attempts=None,
            current_progress=100.0,
        )
    else:
        target = table.requirement(next_level, module)
        requirement = NextLevelRequirement(
            target_accuracy=target.accuracy,
            minimum_attempts=target.minimum_attempts,
            current_progress=calculate_progress(
                accuracy, attempts, target.accuracy, target.minimum_attempts
            ),
        )

    assessment = ModuleAssessment(
        module=module,
        current_level=current_level,
        accuracy=accuracy,
        total_attempts=attempts,
        correct_attempts=max(0, aggregate_result.correct_attempts),
        recent_trend=detect_trend(
            aggregate_result.graded_accuracies, trend_window, trend_threshold
        ),
        next_level_requirement=requirement,
        next_level=next_level,
    )
    logger.debug(
        f"{module.value}: level={current_level.value} "
        f"progress={requirement.current_progress:.1f} trend={assessment.recent_trend.value}"
    )
    return assessment


def evaluate_all(
    records: Iterable[ActivityRecord],
    window: TimeWindow | None = None,
    table: LevelRequirementTable = DEFAULT_LEVEL_TABLE,
    *,
    today: date | None = None,
    correct_threshold: float = CORRECT_ACCURACY_THRESHOLD,
    trend_window: int = TREND_WINDOW,
    trend_threshold: float = TREND_THRESHOLD,
) -> dict[SkillModule, ModuleAssessment]:
    """Aggregate and assess all four skill modules from raw records."""
    per_module = aggregate_by_module(
        records, window, today=today, correct_threshold=correct_threshold
    )
    return {
        module: evaluate(
            module,
            per_module[module],
            table,
            trend_window=trend_window,
            trend_threshold=trend_threshold,
        )
        for module in SkillModule
    }
