"""
Vocabulary review router.

Endpoints for the spaced-repetition scheduler:
- Apply a review outcome to a word
- Build the due review queue
- Summarise a vocabulary book
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel, Field

from config import Settings
from src.api.dependencies import settings_dependency
from src.api.schemas import VocabularyEntryModel
from src.wordbook.scheduler import (
    ReviewOutcome,
    apply_review,
    describe_interval,
    due_for_review,
    forgetting_probability,
    learning_advice,
    review_insights,
    review_priority,
)

router = APIRouter()


# ========================================
# Request/Response Models
# ========================================


class ReviewApplyRequest(BaseModel):
    """Request model for applying a review outcome."""

    entry: VocabularyEntryModel
    outcome: ReviewOutcome
    now: datetime | None = Field(None, description="Review time (default: current UTC time)")


class ReviewApplyResponse(BaseModel):
    """Response model for an applied review."""

    entry: VocabularyEntryModel
    interval_seconds: float
    interval_description: str
    advice: str
    warnings: list[str]


class ReviewQueueRequest(BaseModel):
    """Request model for the due queue and insights."""

    words: list[VocabularyEntryModel] = Field(default_factory=list)
    now: datetime | None = None
    limit: int | None = Field(None, ge=1, description="Maximum words to return")


class QueuedWord(BaseModel):
    entry: VocabularyEntryModel
    priority: float
    forgetting_probability: float


class ReviewQueueResponse(BaseModel):
    """Response model for the due queue."""

    now: datetime
    total_due: int
    words: list[QueuedWord]


def _now(value: datetime | None) -> datetime:
    return value if value is not None else datetime.now(UTC)


# ========================================
# Review Endpoints
# ========================================


@router.post("/apply", response_model=ReviewApplyResponse, summary="Apply a review outcome")
def apply(request: ReviewApplyRequest) -> ReviewApplyResponse:
    """Update mastery and schedule the next review for one word."""
    scheduled = apply_review(request.entry.to_entry(), request.outcome, _now(request.now))
    logger.info(
        f"Review '{scheduled.entry.text}' ({request.outcome.value}) -> "
        f"mastery {scheduled.entry.mastery_level}"
    )
    return ReviewApplyResponse(
        entry=VocabularyEntryModel.from_entry(scheduled.entry),
        interval_seconds=scheduled.interval.total_seconds(),
        interval_description=describe_interval(scheduled.interval),
        advice=learning_advice(scheduled.entry),
        warnings=list(scheduled.warnings),
    )


@router.post("/due", response_model=ReviewQueueResponse, summary="Get due review queue")
def due(
    request: ReviewQueueRequest,
    settings: Settings = Depends(settings_dependency),
) -> ReviewQueueResponse:
    """Words due now: previously reviewed first, most overdue first."""
    now = _now(request.now)
    queue = due_for_review([w.to_entry() for w in request.words], now)
    limit = request.limit or settings.review_queue_limit
    return ReviewQueueResponse(
        now=now,
        total_due=len(queue),
        words=[
            QueuedWord(
                entry=VocabularyEntryModel.from_entry(entry),
                priority=round(review_priority(entry, now), 3),
                forgetting_probability=round(forgetting_probability(entry, now), 3),
            )
            for entry in queue[:limit]
        ],
    )


@router.post("/insights", summary="Summarise a vocabulary book")
def insights(request: ReviewQueueRequest) -> dict[str, Any]:
    """Totals, mastered words, due counts and the mastery distribution."""
    return review_insights([w.to_entry() for w in request.words], _now(request.now)).to_dict()
