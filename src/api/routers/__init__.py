"""API routers for the fluentpath engine."""

from src.api.routers import (
    assessment_router,
    review_router,
    scoring_router,
)

__all__ = [
    "assessment_router",
    "review_router",
    "scoring_router",
]
