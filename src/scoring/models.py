"""
Score result models shared by the pronunciation and writing scorers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class Mistake:
    """One mismatched word position in a spoken attempt."""

    position: int
    expected: str
    actual: str
    suggestion: str

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "expected": self.expected,
            "actual": self.actual,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class ScoreResult:
    """
    Score for a spoken attempt.

    sub_scores holds accuracy, fluency and pronunciation, each 0-100.
    """

    overall_score: float
    sub_scores: Mapping[str, float]
    feedback: str
    mistakes: tuple[Mistake, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def accuracy_score(self) -> float:
        return self.sub_scores.get("accuracy", 0.0)

    @property
    def fluency_score(self) -> float:
        return self.sub_scores.get("fluency", 0.0)

    @property
    def pronunciation_score(self) -> float:
        return self.sub_scores.get("pronunciation", 0.0)

    def to_dict(self) -> dict:
        return {
            "overall_score": self.overall_score,
            "sub_scores": dict(self.sub_scores),
            "feedback": self.feedback,
            "mistakes": [m.to_dict() for m in self.mistakes],
            "warnings": list(self.warnings),
        }


# =============================================================================
# Writing rubric
# =============================================================================


@dataclass(frozen=True)
class RubricCriterion:
    id: str
    name: str
    max_points: int
    description: str = ""


@dataclass(frozen=True)
class WritingRubric:
    criteria: tuple[RubricCriterion, ...]

    @property
    def total_points(self) -> int:
        return sum(c.max_points for c in self.criteria)


DEFAULT_WRITING_RUBRIC = WritingRubric(
    criteria=(
        RubricCriterion("content", "Content", 25, "Relevance and development of ideas"),
        RubricCriterion("organization", "Organization", 20, "Structure and logical flow"),
        RubricCriterion("grammar", "Grammar", 25, "Accuracy of sentence grammar"),
        RubricCriterion("vocabulary", "Vocabulary", 20, "Range and variety of word choice"),
        RubricCriterion("mechanics", "Mechanics", 10, "Punctuation and capitalisation"),
    )
)


@dataclass(frozen=True)
class CriterionScore:
    criterion_id: str
    score: int
    max_score: int
    feedback: str

    @property
    def percentage(self) -> float:
        return 100.0 * self.score / self.max_score if self.max_score > 0 else 0.0

    def to_dict(self) -> dict:
        return {
            "criterion_id": self.criterion_id,
            "score": self.score,
            "max_score": self.max_score,
            "feedback": self.feedback,
        }


@dataclass(frozen=True)
class WritingScoreResult:
    """
    Rubric score for a written attempt.

    overall_score is total_score scaled to 0-100; sub_scores holds the
    same scaling per criterion.
    """

    total_score: int
    max_score: int
    overall_score: float
    criteria_scores: tuple[CriterionScore, ...]
    overall_feedback: str
    suggestions: tuple[str, ...] = ()
    word_count: int = 0
    sentence_count: int = 0
    sub_scores: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> dict:
        return {
            "total_score": self.total_score,
            "max_score": self.max_score,
            "overall_score": self.overall_score,
            "criteria_scores": [c.to_dict() for c in self.criteria_scores],
            "sub_scores": dict(self.sub_scores),
            "overall_feedback": self.overall_feedback,
            "suggestions": list(self.suggestions),
            "word_count": self.word_count,
            "sentence_count": self.sentence_count,
        }
