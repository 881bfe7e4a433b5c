"""
Scoring Module - Heuristic scores for spoken and written attempts.

Components:
- pronunciation: transcript vs target sentence
- writing: rubric-based essay scoring
- models: ScoreResult, WritingScoreResult and the default rubric
"""

from src.scoring.models import (
    DEFAULT_WRITING_RUBRIC,
    CriterionScore,
    Mistake,
    RubricCriterion,
    ScoreResult,
    WritingRubric,
    WritingScoreResult,
)
from src.scoring.pronunciation import score_pronunciation
from src.scoring.writing import score_writing

__all__ = [
    "DEFAULT_WRITING_RUBRIC",
    "CriterionScore",
    "Mistake",
    "RubricCriterion",
    "ScoreResult",
    "WritingRubric",
    "WritingScoreResult",
    "score_pronunciation",
    "score_writing",
]
