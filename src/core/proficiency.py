"""
Proficiency Vocabulary.

Exhaustive enumerations shared by every engine component:
- CEFRLevel: A1-C2 proficiency bands, ordered
- SkillModule: the four independently assessed skill areas
- ActivityModule: every kind of practice activity a record can carry
"""

from __future__ import annotations

from enum import Enum


class CEFRLevel(str, Enum):
    """
    Common European Framework of Reference level.

    Members are declared in ascending order, so list(CEFRLevel) is the
    progression path A1 -> C2.
    """

    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"

    @property
    def rank(self) -> int:
        """Zero-based position in the progression."""
        return _LEVEL_ORDER.index(self)

    def next(self) -> CEFRLevel | None:
        """Level immediately above this one, or None at C2."""
        idx = self.rank
        if idx + 1 < len(_LEVEL_ORDER):
            return _LEVEL_ORDER[idx + 1]
        return None

    def previous(self) -> CEFRLevel | None:
        """Level immediately below this one, or None at A1."""
        idx = self.rank
        return _LEVEL_ORDER[idx - 1] if idx > 0 else None

    @classmethod
    def lowest(cls) -> CEFRLevel:
        return _LEVEL_ORDER[0]

    @classmethod
    def highest(cls) -> CEFRLevel:
        return _LEVEL_ORDER[-1]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        return self.rank >= other.rank


_LEVEL_ORDER: tuple[CEFRLevel, ...] = tuple(CEFRLevel)


class SkillModule(str, Enum):
    """
    Assessed skill module.

    Declaration order is the canonical enumeration order used for
    deterministic tie-breaking.
    """

    READING = "reading"
    LISTENING = "listening"
    SPEAKING = "speaking"
    WRITING = "writing"

    @property
    def order(self) -> int:
        return _MODULE_ORDER.index(self)

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()


_MODULE_ORDER: tuple[SkillModule, ...] = tuple(SkillModule)


class ActivityModule(str, Enum):
    """Module tag carried by a raw activity record."""

    READING = "reading"
    LISTENING = "listening"
    SPEAKING = "speaking"
    WRITING = "writing"
    TRANSLATION = "translation"  # Dictionary lookups, ungraded

    @property
    def skill(self) -> SkillModule | None:
        """Assessed skill module for this activity, None for translation."""
        try:
            return SkillModule(self.value)
        except ValueError:
            return None


class Trend(str, Enum):
    """Direction of recent accuracy movement."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"
