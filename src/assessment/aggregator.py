"""
Record Aggregator.

Reduces raw activity records into accuracy/time statistics over a time
window. Learner history is often sparse, so degenerate input (no records,
no graded records) produces a zeroed result instead of an error.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Iterable, Mapping

from loguru import logger

from src.core.proficiency import ActivityModule, SkillModule
from src.core.records import ActivityRecord, TimeWindow

# Graded records at or above this accuracy count as correct attempts
CORRECT_ACCURACY_THRESHOLD = 50.0


def _empty_counts() -> dict[ActivityModule, int]:
    return {module: 0 for module in ActivityModule}


@dataclass(frozen=True)
class AggregateResult:
    """Statistics for a set of records over a window."""

    total_time_spent: float = 0.0  # seconds
    total_attempts: int = 0  # graded records
    correct_attempts: int = 0
    average_accuracy: float = 0.0  # 0-100
    streak_days: int = 0
    counts_by_module: Mapping[ActivityModule, int] = field(default_factory=_empty_counts)
    graded_accuracies: tuple[float, ...] = ()  # chronological

    def to_dict(self) -> dict:
        return {
            "total_time_spent": self.total_time_spent,
            "total_attempts": self.total_attempts,
            "correct_attempts": self.correct_attempts,
            "average_accuracy": self.average_accuracy,
            "streak_days": self.streak_days,
            "counts_by_module": {m.value: c for m, c in self.counts_by_module.items()},
        }


def filter_window(
    records: Iterable[ActivityRecord],
    window: TimeWindow | None,
) -> list[ActivityRecord]:
    """
    Keep records whose timestamp falls inside ``window``.

    An inverted window (start after end) is a caller error. It is
    asserted here; with assertions disabled it selects nothing.
    """
    records = list(records)
    if window is None:
        return records

    assert not window.is_inverted, "time window start must not be after its end"
    if window.is_inverted:
        return []

    return [r for r in records if window.contains(r.timestamp)]


def calculate_streak(records: Iterable[ActivityRecord], today: date) -> int:
    """
    Count consecutive study days ending at ``today``.

    A day counts when at least one record's timestamp falls on it. The
    scan walks backward from ``today`` and stops at the first empty day,
    so a learner with nothing logged today has a streak of 0. Days are
    UTC calendar days.
    """
    study_days = {r.timestamp.astimezone(UTC).date() for r in records}
    streak = 0
    day = today
    while day in study_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def _clamp_accuracy(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def aggregate(
    records: Iterable[ActivityRecord],
    window: TimeWindow | None = None,
    *,
    today: date | None = None,
    correct_threshold: float = CORRECT_ACCURACY_THRESHOLD,
) -> AggregateResult:
    """
    Aggregate activity records.

    Args:
        records: Raw activity records, any order
        window: Inclusive time window; None keeps all records
        today: Anchor UTC day for the streak (default: window end date,
            else the current date, both in UTC)
        correct_threshold: Accuracy at which a graded record counts as correct

    Returns:
        AggregateResult; all-zero for empty input
    """
    all_records = list(records)
    in_window = filter_window(all_records, window)

    if today is None:
        if window is not None and window.end is not None:
            today = window.end.astimezone(UTC).date()
        else:
            today = datetime.now(UTC).date()

    counts = _empty_counts()
    counts.update(Counter(r.module for r in in_window))

    graded = sorted((r for r in in_window if r.is_graded), key=lambda r: r.timestamp)
    accuracies = tuple(_clamp_accuracy(r.accuracy) for r in graded)
    average = sum(accuracies) / len(accuracies) if accuracies else 0.0

    result = AggregateResult(
        total_time_spent=float(sum(max(0.0, r.time_spent_seconds) for r in in_window)),
        total_attempts=len(accuracies),
        correct_attempts=sum(1 for a in accuracies if a >= correct_threshold),
        average_accuracy=average,
        # Streak spans the whole history, not just the window
        streak_days=calculate_streak(all_records, today),
        counts_by_module=counts,
        graded_accuracies=accuracies,
    )
    logger.debug(
        f"Aggregated {len(in_window)}/{len(all_records)} records: "
        f"attempts={result.total_attempts}, avg={result.average_accuracy:.1f}"
    )
    return result


def aggregate_by_module(
    records: Iterable[ActivityRecord],
    window: TimeWindow | None = None,
    *,
    today: date | None = None,
    correct_threshold: float = CORRECT_ACCURACY_THRESHOLD,
) -> dict[SkillModule, AggregateResult]:
    """Aggregate each skill module's records separately."""
    all_records = list(records)
    return {
        module: aggregate(
            [r for r in all_records if r.module.skill is module],
            window,
            today=today,
            correct_threshold=correct_threshold,
        )
        for module in SkillModule
    }
