"""
Pydantic document models shared by the API and the CLI.

These are the JSON shapes of the engine's inputs. Each model converts to
the frozen domain dataclass it describes; validation errors surface as
HTTP 422 in the API and as a formatted error in the CLI.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from src.core.proficiency import ActivityModule
from src.core.records import ActivityRecord, TimeWindow
from src.wordbook.scheduler import VocabularyEntry, WordAddReason


# ========================================
# Activity records
# ========================================


class ActivityRecordModel(BaseModel):
    """A single practice event."""

    module: ActivityModule
    timestamp: datetime
    time_spent_seconds: float = Field(0.0, ge=0, description="Seconds spent on the activity")
    accuracy: float | None = Field(None, ge=0, le=100, description="0-100, null if ungraded")
    word_ref: str | None = None

    def to_record(self) -> ActivityRecord:
        return ActivityRecord(
            module=self.module,
            timestamp=self.timestamp,
            time_spent_seconds=self.time_spent_seconds,
            accuracy=self.accuracy,
            word_ref=self.word_ref,
        )


class TimeWindowModel(BaseModel):
    """Inclusive time window; either bound may be omitted."""

    start: datetime | None = None
    end: datetime | None = None

    @model_validator(mode="after")
    def _check_order(self) -> TimeWindowModel:
        if self.start is not None and self.end is not None:
            window = TimeWindow(self.start, self.end)
            if window.is_inverted:
                raise ValueError("window start must not be after window end")
        return self

    def to_window(self) -> TimeWindow:
        return TimeWindow(start=self.start, end=self.end)


class RecordsDocument(BaseModel):
    """Records to assess, optionally limited to a window."""

    records: list[ActivityRecordModel] = Field(default_factory=list)
    window: TimeWindowModel | None = None
    today: date | None = Field(None, description="Anchor day for the study streak")

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"records": data}
        return data

    def to_records(self) -> list[ActivityRecord]:
        return [r.to_record() for r in self.records]

    def to_window(self) -> TimeWindow | None:
        return self.window.to_window() if self.window else None


# ========================================
# Vocabulary
# ========================================


class VocabularyEntryModel(BaseModel):
    """
    Stored state of one word.

    Counts and mastery are not range-checked here; the scheduler clamps
    out-of-range values and reports them as warnings.
    """

    text: str = Field(..., min_length=1)
    mastery_level: int = 0
    review_count: int = 0
    correct_count: int = 0
    last_reviewed_at: datetime | None = None
    next_review_due_at: datetime
    add_reason: WordAddReason | None = None

    def to_entry(self) -> VocabularyEntry:
        return VocabularyEntry(
            text=self.text,
            next_review_due_at=self.next_review_due_at,
            mastery_level=self.mastery_level,
            review_count=self.review_count,
            correct_count=self.correct_count,
            last_reviewed_at=self.last_reviewed_at,
            add_reason=self.add_reason,
        )

    @classmethod
    def from_entry(cls, entry: VocabularyEntry) -> VocabularyEntryModel:
        return cls(
            text=entry.text,
            mastery_level=entry.mastery_level,
            review_count=entry.review_count,
            correct_count=entry.correct_count,
            last_reviewed_at=entry.last_reviewed_at,
            next_review_due_at=entry.next_review_due_at,
            add_reason=entry.add_reason,
        )


class WordbookDocument(BaseModel):
    words: list[VocabularyEntryModel] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"words": data}
        return data

    def to_entries(self) -> list[VocabularyEntry]:
        return [w.to_entry() for w in self.words]
