"""
Practice Record Builders.

Turn raw practice results into ActivityRecords with a single 0-100
accuracy. Each builder is a pure function; storing the record is the
caller's job.

Weights:
- speaking: pronunciation 60%, fluency 25%, completeness 15%
- writing: grammar 35%, vocabulary 25%, coherence 30%, creativity 10%
"""

from __future__ import annotations

from datetime import datetime

from src.core.proficiency import ActivityModule
from src.core.records import ActivityRecord

DEFAULT_FLUENCY_SCORE = 70.0
DEFAULT_COMPLETENESS_SCORE = 80.0
DEFAULT_CREATIVITY_SCORE = 70.0


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def question_accuracy(correct: int, total: int, fallback_score: float = 0.0) -> float:
    """Share of correct answers, or ``fallback_score`` when nothing was asked."""
    if total > 0:
        return _clamp(100.0 * max(0, correct) / total)
    return _clamp(fallback_score)


def reading_record(
    timestamp: datetime,
    correct_answers: int,
    total_questions: int,
    comprehension_score: float = 0.0,
    time_spent_seconds: float = 0.0,
) -> ActivityRecord:
    """Reading session scored by questions answered, else comprehension score."""
    return ActivityRecord(
        module=ActivityModule.READING,
        timestamp=timestamp,
        time_spent_seconds=max(0.0, time_spent_seconds),
        accuracy=question_accuracy(correct_answers, total_questions, comprehension_score),
    )


def listening_record(
    timestamp: datetime,
    correct_segments: int,
    total_segments: int,
    final_score: float = 0.0,
    time_spent_seconds: float = 0.0,
) -> ActivityRecord:
    """Listening session scored by segments understood, else the final score."""
    return ActivityRecord(
        module=ActivityModule.LISTENING,
        timestamp=timestamp,
        time_spent_seconds=max(0.0, time_spent_seconds),
        accuracy=question_accuracy(correct_segments, total_segments, final_score),
    )


def speaking_accuracy(
    pronunciation_score: float,
    fluency_score: float | None = None,
    completeness_score: float | None = None,
) -> float:
    fluency = DEFAULT_FLUENCY_SCORE if fluency_score is None else fluency_score
    completeness = (
        DEFAULT_COMPLETENESS_SCORE if completeness_score is None else completeness_score
    )
    return _clamp(
        _clamp(pronunciation_score) * 0.6 + _clamp(fluency) * 0.25 + _clamp(completeness) * 0.15
    )


def speaking_record(
    timestamp: datetime,
    pronunciation_score: float,
    fluency_score: float | None = None,
    completeness_score: float | None = None,
    time_spent_seconds: float = 0.0,
) -> ActivityRecord:
    return ActivityRecord(
        module=ActivityModule.SPEAKING,
        timestamp=timestamp,
        time_spent_seconds=max(0.0, time_spent_seconds),
        accuracy=speaking_accuracy(pronunciation_score, fluency_score, completeness_score),
    )


def writing_accuracy(
    grammar_score: float,
    vocabulary_score: float,
    coherence_score: float,
    creativity_score: float | None = None,
) -> float:
    creativity = DEFAULT_CREATIVITY_SCORE if creativity_score is None else creativity_score
    return _clamp(
        _clamp(grammar_score) * 0.35
        + _clamp(vocabulary_score) * 0.25
        + _clamp(coherence_score) * 0.3
        + _clamp(creativity) * 0.1
    )


def writing_record(
    timestamp: datetime,
    grammar_score: float,
    vocabulary_score: float,
    coherence_score: float,
    creativity_score: float | None = None,
    time_spent_seconds: float = 0.0,
) -> ActivityRecord:
    return ActivityRecord(
        module=ActivityModule.WRITING,
        timestamp=timestamp,
        time_spent_seconds=max(0.0, time_spent_seconds),
        accuracy=writing_accuracy(
            grammar_score, vocabulary_score, coherence_score, creativity_score
        ),
    )


def translation_record(
    timestamp: datetime,
    word: str,
    lookup_seconds: float = 0.0,
) -> ActivityRecord:
    """Dictionary lookup; counted as activity but never graded."""
    return ActivityRecord(
        module=ActivityModule.TRANSLATION,
        timestamp=timestamp,
        time_spent_seconds=max(0.0, lookup_seconds),
        accuracy=None,
        word_ref=word.strip().lower() or None,
    )
