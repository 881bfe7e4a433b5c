"""
Scoring router.

Endpoints for heuristic scores of spoken and written attempts.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from src.scoring.models import DEFAULT_WRITING_RUBRIC, RubricCriterion, WritingRubric
from src.scoring.pronunciation import score_pronunciation
from src.scoring.writing import score_writing

router = APIRouter()


# ========================================
# Request Models
# ========================================


class PronunciationRequest(BaseModel):
    """Request model for scoring a spoken attempt."""

    original: str = Field(..., description="Target sentence")
    spoken: str = Field(..., description="Recognised transcript")
    confidence: float = Field(..., description="Recogniser confidence, 0-1 (clamped)")


class RubricCriterionModel(BaseModel):
    id: str
    name: str
    max_points: int = Field(..., gt=0)
    description: str = ""


class WritingRequest(BaseModel):
    """Request model for scoring an essay."""

    content: str
    word_limit: int | None = Field(None, ge=1)
    keywords: list[str] | None = None
    rubric: list[RubricCriterionModel] | None = Field(
        None, description="Custom rubric criteria (default rubric if omitted)"
    )

    def to_rubric(self) -> WritingRubric:
        if not self.rubric:
            return DEFAULT_WRITING_RUBRIC
        return WritingRubric(
            criteria=tuple(
                RubricCriterion(c.id, c.name, c.max_points, c.description) for c in self.rubric
            )
        )


# ========================================
# Scoring Endpoints
# ========================================


@router.post("/pronunciation", summary="Score a spoken attempt")
def pronunciation(request: PronunciationRequest) -> dict[str, Any]:
    return score_pronunciation(request.original, request.spoken, request.confidence).to_dict()


@router.post("/writing", summary="Score an essay against a rubric")
def writing(request: WritingRequest) -> dict[str, Any]:
    return score_writing(
        request.content,
        rubric=request.to_rubric(),
        word_limit=request.word_limit,
        keywords=request.keywords,
    ).to_dict()
