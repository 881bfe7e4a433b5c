"""
Spaced-Repetition Scheduler for the vocabulary book.

Each word carries a mastery level 0-5. A review outcome moves the level
and picks the next due time from an interval band:

    unknown  -> mastery - 1, short band
    familiar -> mastery kept, medium band
    known    -> mastery + 1, long band

Interval curve (per mastery level L):
    short  = 1 day + 12 hours x L
    medium = 1.5 x short
    long   = 2, 4, 7, 12, 20, 30 days

Every function here is pure: callers own storage and must serialise
concurrent reviews of the same word.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable

from loguru import logger

from src.core.records import ensure_aware

MIN_MASTERY = 0
MAX_MASTERY = 5
MASTERED_LEVEL = 4

# Memory strength in days per mastery level for the forgetting curve
MEMORY_STRENGTH_PER_LEVEL = 2.5


class ReviewOutcome(str, Enum):
    """Learner's self-reported recall of a word."""

    UNKNOWN = "unknown"
    FAMILIAR = "familiar"
    KNOWN = "known"


class IntervalBand(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class WordAddReason(str, Enum):
    """Why a word entered the vocabulary book."""

    TRANSLATION_LOOKUP = "translation_lookup"
    PRONUNCIATION_ERROR = "pronunciation_error"
    LISTENING_DIFFICULTY = "listening_difficulty"


class IntervalCurveError(ValueError):
    """Raised when an interval curve breaks the ordering rules."""


_OUTCOME_BAND = {
    ReviewOutcome.UNKNOWN: IntervalBand.SHORT,
    ReviewOutcome.FAMILIAR: IntervalBand.MEDIUM,
    ReviewOutcome.KNOWN: IntervalBand.LONG,
}


def clamp_mastery(level: int) -> int:
    return max(MIN_MASTERY, min(MAX_MASTERY, int(level)))


# =============================================================================
# Interval curve
# =============================================================================


@dataclass(frozen=True)
class IntervalCurve:
    """
    Review interval per mastery level and band.

    Validated on construction: every band strictly increases with the
    level, long > medium > short at every level, and long never exceeds
    ``max_interval``.
    """

    short_base: timedelta = timedelta(days=1)
    short_step: timedelta = timedelta(hours=12)
    medium_factor: float = 1.5
    long_days: tuple[int, ...] = (2, 4, 7, 12, 20, 30)
    max_interval: timedelta = timedelta(days=30)

    def __post_init__(self):
        if len(self.long_days) != MAX_MASTERY + 1:
            raise IntervalCurveError(
                f"long_days needs {MAX_MASTERY + 1} entries, got {len(self.long_days)}"
            )
        if self.short_base <= timedelta(0) or self.short_step <= timedelta(0):
            raise IntervalCurveError("short_base and short_step must be positive")
        if self.medium_factor <= 1.0:
            raise IntervalCurveError("medium_factor must be greater than 1")

        for level in range(MIN_MASTERY, MAX_MASTERY + 1):
            short = self.interval(level, IntervalBand.SHORT)
            medium = self.interval(level, IntervalBand.MEDIUM)
            long = self.interval(level, IntervalBand.LONG)
            if not short < medium < long:
                raise IntervalCurveError(f"bands out of order at mastery level {level}")
            if long > self.max_interval:
                raise IntervalCurveError(
                    f"long interval at level {level} exceeds {self.max_interval.days} days"
                )
            if level > MIN_MASTERY and long <= self.interval(level - 1, IntervalBand.LONG):
                raise IntervalCurveError("long_days must be strictly increasing")

    def interval(self, level: int, band: IntervalBand) -> timedelta:
        level = clamp_mastery(level)
        short = self.short_base + self.short_step * level
        if band is IntervalBand.SHORT:
            return short
        if band is IntervalBand.MEDIUM:
            return short * self.medium_factor
        return timedelta(days=self.long_days[level])


DEFAULT_INTERVAL_CURVE = IntervalCurve()


def interval(
    level: int,
    band: IntervalBand,
    curve: IntervalCurve = DEFAULT_INTERVAL_CURVE,
) -> timedelta:
    """Review interval for a mastery level and band."""
    return curve.interval(level, IntervalBand(band))


def describe_interval(delta: timedelta) -> str:
    """Short English description of an interval ("tomorrow", "in 2 weeks")."""
    days = delta.total_seconds() / 86400
    if days < 1:
        return "now"
    if days < 2:
        return "tomorrow"
    if days < 7:
        return f"in {round(days)} days"
    if days < 30:
        weeks = round(days / 7)
        return f"in {weeks} week{'s' if weeks != 1 else ''}"
    months = round(days / 30)
    return f"in {months} month{'s' if months != 1 else ''}"


# =============================================================================
# Vocabulary entries
# =============================================================================


@dataclass(frozen=True)
class VocabularyEntry:
    """
    One word in the vocabulary book.

    last_reviewed_at is None until the first review; a fresh entry is
    due immediately.
    """

    text: str
    next_review_due_at: datetime
    mastery_level: int = 0  # 0-5
    review_count: int = 0
    correct_count: int = 0
    last_reviewed_at: datetime | None = None
    add_reason: WordAddReason | None = None

    def __post_init__(self):
        object.__setattr__(self, "next_review_due_at", ensure_aware(self.next_review_due_at))
        if self.last_reviewed_at is not None:
            object.__setattr__(self, "last_reviewed_at", ensure_aware(self.last_reviewed_at))
        if self.add_reason is not None:
            object.__setattr__(self, "add_reason", WordAddReason(self.add_reason))

    @property
    def is_new(self) -> bool:
        return self.review_count == 0

    @property
    def is_mastered(self) -> bool:
        return self.mastery_level >= MASTERED_LEVEL

    def is_due(self, now: datetime) -> bool:
        return self.next_review_due_at <= ensure_aware(now)

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "mastery_level": self.mastery_level,
            "review_count": self.review_count,
            "correct_count": self.correct_count,
            "last_reviewed_at": (
                self.last_reviewed_at.isoformat() if self.last_reviewed_at else None
            ),
            "next_review_due_at": self.next_review_due_at.isoformat(),
            "add_reason": self.add_reason.value if self.add_reason else None,
        }


@dataclass(frozen=True)
class ScheduledReview:
    """Result of applying one review outcome."""

    entry: VocabularyEntry
    interval: timedelta
    warnings: tuple[str, ...] = field(default=())


def new_entry(
    text: str,
    now: datetime,
    add_reason: WordAddReason | None = None,
) -> VocabularyEntry:
    """Entry for a newly looked-up word: mastery 0, due immediately."""
    return VocabularyEntry(
        text=text.strip().lower(),
        next_review_due_at=now,
        add_reason=add_reason,
    )


def sanitize_entry(entry: VocabularyEntry) -> tuple[VocabularyEntry, list[str]]:
    """
    Clamp out-of-range stored state.

    Returns:
        (clamped entry, warnings describing every correction)
    """
    warnings: list[str] = []
    mastery = entry.mastery_level
    review_count = entry.review_count
    correct_count = entry.correct_count

    if not MIN_MASTERY <= mastery <= MAX_MASTERY:
        warnings.append(
            f"mastery_level {mastery} for '{entry.text}' clamped to "
            f"{clamp_mastery(mastery)}"
        )
        mastery = clamp_mastery(mastery)
    if review_count < 0:
        warnings.append(f"negative review_count {review_count} for '{entry.text}' reset to 0")
        review_count = 0
    if correct_count < 0:
        warnings.append(f"negative correct_count {correct_count} for '{entry.text}' reset to 0")
        correct_count = 0
    if correct_count > review_count:
        warnings.append(
            f"correct_count {correct_count} exceeds review_count {review_count} "
            f"for '{entry.text}'"
        )
        correct_count = review_count
    if entry.last_reviewed_at is not None and entry.next_review_due_at < entry.last_reviewed_at:
        warnings.append(f"'{entry.text}' was due before it was last reviewed")

    for message in warnings:
        logger.warning(message)

    if not warnings:
        return entry, warnings
    return (
        replace(
            entry,
            mastery_level=mastery,
            review_count=review_count,
            correct_count=correct_count,
        ),
        warnings,
    )


def apply_review(
    entry: VocabularyEntry,
    outcome: ReviewOutcome,
    now: datetime,
    curve: IntervalCurve = DEFAULT_INTERVAL_CURVE,
) -> ScheduledReview:
    """
    Apply a review outcome and schedule the next review.

    Args:
        entry: Current state of the word
        outcome: unknown / familiar / known
        now: Review time; becomes last_reviewed_at
        curve: Interval curve

    Returns:
        ScheduledReview with the updated entry, the chosen interval and
        any warnings raised while clamping stored state
    """
    outcome = ReviewOutcome(outcome)
    now = ensure_aware(now)
    entry, warnings = sanitize_entry(entry)

    mastery = entry.mastery_level
    correct_count = entry.correct_count
    if outcome is ReviewOutcome.UNKNOWN:
        mastery = max(MIN_MASTERY, mastery - 1)
    elif outcome is ReviewOutcome.KNOWN:
        mastery = min(MAX_MASTERY, mastery + 1)
        correct_count += 1

    delta = curve.interval(mastery, _OUTCOME_BAND[outcome])
    updated = replace(
        entry,
        mastery_level=mastery,
        review_count=entry.review_count + 1,
        correct_count=correct_count,
        last_reviewed_at=now,
        next_review_due_at=now + delta,
    )
    logger.debug(
        f"Reviewed '{entry.text}' as {outcome.value}: mastery "
        f"{entry.mastery_level} -> {mastery}, next in {delta}"
    )
    return ScheduledReview(entry=updated, interval=delta, warnings=tuple(warnings))


def mark_mastered(
    entry: VocabularyEntry,
    now: datetime,
    curve: IntervalCurve = DEFAULT_INTERVAL_CURVE,
) -> VocabularyEntry:
    """Set a word to full mastery and schedule it on the longest interval."""
    now = ensure_aware(now)
    return replace(
        entry,
        mastery_level=MAX_MASTERY,
        last_reviewed_at=now,
        next_review_due_at=now + curve.interval(MAX_MASTERY, IntervalBand.LONG),
    )


def reset_progress(entry: VocabularyEntry, now: datetime) -> VocabularyEntry:
    """Drop a word back to mastery 0, due immediately."""
    return replace(entry, mastery_level=MIN_MASTERY, next_review_due_at=ensure_aware(now))


# =============================================================================
# Review queue and insights
# =============================================================================


def _queue_key(entry: VocabularyEntry) -> tuple[datetime, int, str]:
    return (entry.next_review_due_at, entry.mastery_level, entry.text)


def due_for_review(
    entries: Iterable[VocabularyEntry],
    now: datetime,
    limit: int | None = None,
) -> list[VocabularyEntry]:
    """
    Entries due at ``now``.

    Previously reviewed words come first, then never-reviewed ones. Each
    group is ordered most overdue first, then lower mastery, then text.
    """
    now = ensure_aware(now)
    due = [e for e in entries if e.is_due(now)]
    reviewed = sorted((e for e in due if not e.is_new), key=_queue_key)
    fresh = sorted((e for e in due if e.is_new), key=_queue_key)
    queue = reviewed + fresh
    return queue[:limit] if limit is not None else queue


def review_priority(entry: VocabularyEntry, now: datetime) -> float:
    """Overdue days plus a weight for low mastery; never negative."""
    overdue_days = max(
        0.0, (ensure_aware(now) - entry.next_review_due_at).total_seconds() / 86400
    )
    weight = (MAX_MASTERY - clamp_mastery(entry.mastery_level)) * 0.1
    return max(0.0, overdue_days + weight)


def forgetting_probability(entry: VocabularyEntry, now: datetime) -> float:
    """
    Probability (0-1) that the word has been forgotten by ``now``.

    Simplified forgetting curve ``1 - exp(-t / S)`` where t is days since
    the last review and S grows with mastery. Never-reviewed words return 1.
    """
    if entry.last_reviewed_at is None:
        return 1.0
    days = max(0.0, (ensure_aware(now) - entry.last_reviewed_at).total_seconds() / 86400)
    strength = max(0.1, clamp_mastery(entry.mastery_level) * MEMORY_STRENGTH_PER_LEVEL)
    return max(0.0, min(1.0, 1.0 - math.exp(-days / strength)))


def learning_advice(entry: VocabularyEntry) -> str:
    level = clamp_mastery(entry.mastery_level)
    if level == 0:
        return "New word: practise it several times to build a first memory."
    if level <= 2:
        return "Not yet familiar: study it with example sentences and context."
    if level <= 4:
        return "Good progress: keep up the current review rhythm."
    return "Mastered: an occasional review is enough to keep it."


@dataclass(frozen=True)
class ReviewInsights:
    """Summary of a vocabulary book at a point in time."""

    total_words: int
    mastered_words: int
    new_words: int
    due_now: int
    due_today: int
    due_this_week: int
    by_mastery: dict[int, int]
    by_reason: dict[str, int]
    average_mastery: float
    recall_rate: float  # correct reviews / reviews, 0-100

    def to_dict(self) -> dict:
        return {
            "total_words": self.total_words,
            "mastered_words": self.mastered_words,
            "new_words": self.new_words,
            "due_now": self.due_now,
            "due_today": self.due_today,
            "due_this_week": self.due_this_week,
            "by_mastery": dict(self.by_mastery),
            "by_reason": dict(self.by_reason),
            "average_mastery": self.average_mastery,
            "recall_rate": self.recall_rate,
        }


def review_insights(entries: Iterable[VocabularyEntry], now: datetime) -> ReviewInsights:
    entries = list(entries)
    now = ensure_aware(now)
    end_of_day = now.replace(hour=23, minute=59, second=59, microsecond=999999)
    week_ahead = now + timedelta(days=7)

    levels = [clamp_mastery(e.mastery_level) for e in entries]
    by_mastery = {level: 0 for level in range(MIN_MASTERY, MAX_MASTERY + 1)}
    by_mastery.update(Counter(levels))

    by_reason = {reason.value: 0 for reason in WordAddReason}
    by_reason.update(Counter(e.add_reason.value for e in entries if e.add_reason))

    reviews = sum(max(0, e.review_count) for e in entries)
    correct = sum(max(0, e.correct_count) for e in entries)

    return ReviewInsights(
        total_words=len(entries),
        mastered_words=sum(1 for level in levels if level >= MASTERED_LEVEL),
        new_words=sum(1 for e in entries if e.review_count <= 0),
        due_now=sum(1 for e in entries if e.next_review_due_at <= now),
        due_today=sum(1 for e in entries if e.next_review_due_at <= end_of_day),
        due_this_week=sum(1 for e in entries if e.next_review_due_at <= week_ahead),
        by_mastery=by_mastery,
        by_reason=by_reason,
        average_mastery=sum(levels) / len(levels) if levels else 0.0,
        recall_rate=min(100.0, 100.0 * correct / reviews) if reviews else 0.0,
    )
