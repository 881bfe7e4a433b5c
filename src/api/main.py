"""
FastAPI application for the fluentpath engine.

Provides a stateless REST API for:
- CEFR proficiency assessment and upgrade decisions
- Vocabulary review scheduling
- Pronunciation and writing scores

Every request carries the data it needs; nothing is stored.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from config import get_settings
from src.api.dependencies import level_table_dependency
from src.core.level_table import LevelRequirementTable, LevelTableConfigError
from src.core.log_setup import configure_logging
from src.wordbook.scheduler import IntervalCurveError

VERSION = "0.1.0"

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    configure_logging(settings)
    logger.info("Starting fluentpath engine service...")
    # Fail fast on a broken level table
    level_table_dependency()
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    # Shutdown
    logger.info("Shutting down fluentpath engine service...")


app = FastAPI(
    title="FluentPath Engine",
    description="""
    Adaptive assessment and review scheduling for English learners.

    ## Features

    - **Assessment**: CEFR level per skill module, upgrade decision, recommendations
    - **Review**: Spaced-repetition scheduling for the vocabulary book
    - **Scoring**: Heuristic pronunciation and writing scores

    ## Data Flow

    ```
    Activity records
        ↓ aggregate
    Module statistics
        ↓ evaluate
    Module assessments
        ↓ decide
    Proficiency assessment
    ```
    """,
    version=VERSION,
    lifespan=lifespan,
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LevelTableConfigError)
@app.exception_handler(IntervalCurveError)
@app.exception_handler(FileNotFoundError)
async def configuration_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Configuration error while handling {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": f"Configuration error: {exc}"})


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "fluentpath-engine",
        "version": VERSION,
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check including level table validity."""
    try:
        level_table_dependency()
        table_status, table_error = "ok", None
    except (LevelTableConfigError, FileNotFoundError) as exc:
        table_status, table_error = "error", str(exc)

    result: dict[str, Any] = {
        "status": "healthy" if table_status == "ok" else "unhealthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "components": {
            "level_table": table_status,
        },
        "config": {
            "level_requirements_path": settings.level_requirements_path,
            "review_queue_limit": settings.review_queue_limit,
            **settings.get_assessment_config(),
        },
    }
    if table_error:
        result["errors"] = {"level_table": table_error}
    return result


@app.get("/api/levels", tags=["Assessment"])
def get_levels(
    table: LevelRequirementTable = Depends(level_table_dependency),
) -> dict[str, Any]:
    """Active level requirement table keyed by level then module."""
    return table.to_dict()


# ========================================
# Import and mount routers
# ========================================

from src.api.routers import (
    assessment_router,
    review_router,
    scoring_router,
)

app.include_router(assessment_router.router, prefix="/api/assessment", tags=["Assessment"])
app.include_router(review_router.router, prefix="/api/review", tags=["Review"])
app.include_router(scoring_router.router, prefix="/api/scoring", tags=["Scoring"])
