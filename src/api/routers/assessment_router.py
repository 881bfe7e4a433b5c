"""
Assessment router.

Endpoints for CEFR placement:
- Full proficiency assessment with upgrade decision
- Raw activity statistics per skill module
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from loguru import logger

from config import Settings
from src.api.dependencies import level_table_dependency, settings_dependency
from src.api.schemas import RecordsDocument
from src.assessment.aggregator import aggregate, aggregate_by_module
from src.assessment.evaluator import evaluate_all
from src.assessment.upgrade import decide
from src.core.level_table import LevelRequirementTable

router = APIRouter()


# ========================================
# Assessment Endpoints
# ========================================


@router.post("", summary="Assess proficiency from activity records")
def assess(
    document: RecordsDocument,
    settings: Settings = Depends(settings_dependency),
    table: LevelRequirementTable = Depends(level_table_dependency),
) -> dict[str, Any]:
    """
    Place the learner on the CEFR scale per module and decide whether an
    upgrade is possible.
    """
    records = document.to_records()
    logger.info(f"Assessing {len(records)} activity records")

    assessments = evaluate_all(
        records,
        document.to_window(),
        table,
        today=document.today,
        correct_threshold=settings.correct_accuracy_threshold,
        trend_window=settings.trend_window,
        trend_threshold=settings.trend_threshold,
    )
    return decide(assessments, table).to_dict()


@router.post("/stats", summary="Aggregate activity statistics")
def stats(
    document: RecordsDocument,
    settings: Settings = Depends(settings_dependency),
) -> dict[str, Any]:
    """Overall and per-module statistics for the records in the window."""
    records = document.to_records()
    window = document.to_window()
    overall = aggregate(
        records,
        window,
        today=document.today,
        correct_threshold=settings.correct_accuracy_threshold,
    )
    per_module = aggregate_by_module(
        records,
        window,
        today=document.today,
        correct_threshold=settings.correct_accuracy_threshold,
    )
    return {
        "overall": overall.to_dict(),
        "modules": {module.value: result.to_dict() for module, result in per_module.items()},
    }
