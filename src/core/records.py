"""
Activity Records.

Immutable practice events produced by learning sessions and consumed by
the record aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from src.core.proficiency import ActivityModule


def ensure_aware(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so records from any source compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass(frozen=True)
class ActivityRecord:
    """
    A single practice event.

    accuracy is None for ungraded activities (dictionary lookups,
    passive listening).
    """

    module: ActivityModule
    timestamp: datetime
    time_spent_seconds: float = 0.0
    accuracy: float | None = None  # 0-100
    word_ref: str | None = None

    def __post_init__(self):
        # Normalise on construction; frozen dataclass needs object.__setattr__
        object.__setattr__(self, "module", ActivityModule(self.module))
        object.__setattr__(self, "timestamp", ensure_aware(self.timestamp))

    @property
    def is_graded(self) -> bool:
        return self.accuracy is not None


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive time range ``[start, end]``; either bound may be open."""

    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self):
        if self.start is not None:
            object.__setattr__(self, "start", ensure_aware(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", ensure_aware(self.end))

    @property
    def is_inverted(self) -> bool:
        return self.start is not None and self.end is not None and self.start > self.end

    def contains(self, moment: datetime) -> bool:
        moment = ensure_aware(moment)
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True
