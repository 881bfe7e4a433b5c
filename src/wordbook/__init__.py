"""
Wordbook Module - Vocabulary review scheduling.

Components:
- scheduler: mastery updates, interval curve, review queue and insights
"""

from src.wordbook.scheduler import (
    DEFAULT_INTERVAL_CURVE,
    IntervalBand,
    IntervalCurve,
    IntervalCurveError,
    ReviewInsights,
    ReviewOutcome,
    ScheduledReview,
    VocabularyEntry,
    WordAddReason,
    apply_review,
    due_for_review,
    forgetting_probability,
    interval,
    learning_advice,
    new_entry,
    review_insights,
    review_priority,
)

__all__ = [
    "DEFAULT_INTERVAL_CURVE",
    "IntervalBand",
    "IntervalCurve",
    "IntervalCurveError",
    "ReviewInsights",
    "ReviewOutcome",
    "ScheduledReview",
    "VocabularyEntry",
    "WordAddReason",
    "apply_review",
    "due_for_review",
    "forgetting_probability",
    "interval",
    "learning_advice",
    "new_entry",
    "review_insights",
    "review_priority",
]
