"""
Level Requirement Table.

Static CEFR x module thresholds that the assessment evaluator walks to
place a learner. The table is immutable and validated when it is built,
so a broken configuration fails at load time rather than mid-assessment.

Invariants:
- Every CEFR level defines a requirement for every skill module
- accuracy is within [0, 100], minimum_attempts >= 0
- Both thresholds are non-decreasing from A1 to C2 for every module
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from loguru import logger

from src.core.proficiency import CEFRLevel, SkillModule


class LevelTableConfigError(ValueError):
    """Raised when a level requirement table is incomplete or inconsistent."""


@dataclass(frozen=True)
class LevelRequirement:
    """Accuracy and volume needed to hold a level in one module."""

    accuracy: float  # 0-100
    minimum_attempts: int

    def is_met(self, accuracy: float, attempts: int) -> bool:
        return accuracy >= self.accuracy and attempts >= self.minimum_attempts

    def to_dict(self) -> dict[str, float | int]:
        return {"accuracy": self.accuracy, "minimum_attempts": self.minimum_attempts}


class LevelRequirementTable:
    """
    Immutable CEFR x module requirement table.

    Construction validates the table; use ``LevelRequirementTable.from_mapping``
    or ``load_level_table`` to build one from plain data.
    """

    def __init__(
        self,
        requirements: Mapping[CEFRLevel, Mapping[SkillModule, LevelRequirement]],
    ):
        frozen = {
            level: MappingProxyType(dict(per_module))
            for level, per_module in requirements.items()
        }
        self._requirements = MappingProxyType(frozen)
        self.validate()

    def __getitem__(self, level: CEFRLevel) -> Mapping[SkillModule, LevelRequirement]:
        return self._requirements[level]

    def __iter__(self) -> Iterator[CEFRLevel]:
        return iter(CEFRLevel)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LevelRequirementTable):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(
            tuple(
                (level, module, float(req.accuracy), int(req.minimum_attempts))
                for level in CEFRLevel
                for module, req in sorted(
                    self._requirements[level].items(), key=lambda item: item[0].order
                )
            )
        )

    def requirement(self, level: CEFRLevel, module: SkillModule) -> LevelRequirement:
        """Requirement for holding ``level`` in ``module``."""
        return self._requirements[level][module]

    def validate(self) -> None:
        """
        Check completeness, ranges and per-module monotonicity.

        Raises:
            LevelTableConfigError: On the first violation found
        """
        for level in CEFRLevel:
            if level not in self._requirements:
                raise LevelTableConfigError(f"Missing requirements for level {level.value}")
            for module in SkillModule:
                if module not in self._requirements[level]:
                    raise LevelTableConfigError(
                        f"Level {level.value} is missing a requirement for {module.value}"
                    )
                req = self._requirements[level][module]
                if not 0.0 <= req.accuracy <= 100.0:
                    raise LevelTableConfigError(
                        f"{level.value}/{module.value} accuracy must be within [0, 100]"
                    )
                if req.minimum_attempts < 0:
                    raise LevelTableConfigError(
                        f"{level.value}/{module.value} minimum_attempts must be >= 0"
                    )

        for module in SkillModule:
            previous: LevelRequirement | None = None
            for level in CEFRLevel:
                req = self._requirements[level][module]
                if previous is not None and (
                    req.accuracy < previous.accuracy
                    or req.minimum_attempts < previous.minimum_attempts
                ):
                    raise LevelTableConfigError(
                        f"Thresholds for {module.value} decrease at level {level.value}"
                    )
                previous = req

    def to_dict(self) -> dict[str, dict[str, dict[str, float | int]]]:
        """Plain JSON-ready representation keyed by level then module."""
        return {
            level.value: {
                module.value: self._requirements[level][module].to_dict()
                for module in SkillModule
            }
            for level in CEFRLevel
        }

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> LevelRequirementTable:
        """
        Build a table from plain data.

        Accepts ``{"B1": {"reading": {"accuracy": 75, "minimum_attempts": 20}}}``;
        ``min_attempts`` is accepted as an alias of ``minimum_attempts``.

        Raises:
            LevelTableConfigError: If the data is malformed or fails validation
        """
        if not isinstance(raw, Mapping):
            raise LevelTableConfigError("Level table must be a JSON object keyed by CEFR level")

        requirements: dict[CEFRLevel, dict[SkillModule, LevelRequirement]] = {}
        for level_key, per_module in raw.items():
            try:
                level = CEFRLevel(str(level_key).strip().upper())
            except ValueError as exc:
                raise LevelTableConfigError(f"Unknown CEFR level: {level_key}") from exc
            if not isinstance(per_module, Mapping):
                raise LevelTableConfigError(f"Level {level.value} must map modules to requirements")

            requirements[level] = {}
            for module_key, entry in per_module.items():
                try:
                    module = SkillModule(str(module_key).strip().lower())
                except ValueError as exc:
                    raise LevelTableConfigError(f"Unknown module: {module_key}") from exc
                if not isinstance(entry, Mapping):
                    raise LevelTableConfigError(
                        f"{level.value}/{module.value} must be an object"
                    )
                attempts_raw = entry.get("minimum_attempts", entry.get("min_attempts"))
                try:
                    accuracy = float(entry["accuracy"])
                    attempts = int(attempts_raw)
                except (KeyError, TypeError, ValueError) as exc:
                    raise LevelTableConfigError(
                        f"{level.value}/{module.value} needs numeric accuracy and minimum_attempts"
                    ) from exc
                requirements[level][module] = LevelRequirement(accuracy, attempts)

        return cls(requirements)


def _req(accuracy: float, minimum_attempts: int) -> LevelRequirement:
    return LevelRequirement(accuracy=accuracy, minimum_attempts=minimum_attempts)


# ============================================================================
# Default thresholds
# ============================================================================

DEFAULT_LEVEL_TABLE = LevelRequirementTable(
    {
        CEFRLevel.A1: {
            SkillModule.READING: _req(60, 10),
            SkillModule.LISTENING: _req(55, 10),
            SkillModule.SPEAKING: _req(50, 5),
            SkillModule.WRITING: _req(45, 5),
        },
        CEFRLevel.A2: {
            SkillModule.READING: _req(70, 15),
            SkillModule.LISTENING: _req(65, 15),
            SkillModule.SPEAKING: _req(60, 10),
            SkillModule.WRITING: _req(55, 8),
        },
        CEFRLevel.B1: {
            SkillModule.READING: _req(75, 20),
            SkillModule.LISTENING: _req(70, 20),
            SkillModule.SPEAKING: _req(65, 15),
            SkillModule.WRITING: _req(60, 12),
        },
        CEFRLevel.B2: {
            SkillModule.READING: _req(80, 25),
            SkillModule.LISTENING: _req(75, 25),
            SkillModule.SPEAKING: _req(70, 20),
            SkillModule.WRITING: _req(65, 15),
        },
        CEFRLevel.C1: {
            SkillModule.READING: _req(85, 30),
            SkillModule.LISTENING: _req(80, 30),
            SkillModule.SPEAKING: _req(75, 25),
            SkillModule.WRITING: _req(70, 20),
        },
        CEFRLevel.C2: {
            SkillModule.READING: _req(90, 35),
            SkillModule.LISTENING: _req(85, 35),
            SkillModule.SPEAKING: _req(80, 30),
            SkillModule.WRITING: _req(75, 25),
        },
    }
)


def load_level_table(path: str | Path | None = None) -> LevelRequirementTable:
    """
    Load a level table from a JSON file.

    Args:
        path: JSON file path; None returns the built-in defaults

    Returns:
        Validated LevelRequirementTable

    Raises:
        FileNotFoundError: If ``path`` does not exist
        LevelTableConfigError: If the file is not valid JSON or fails validation
    """
    if path is None:
        return DEFAULT_LEVEL_TABLE

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Level table file not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            raw = json.load(fh)
        except json.JSONDecodeError as exc:
            raise LevelTableConfigError(f"Level table file is not valid JSON: {path}") from exc

    table = LevelRequirementTable.from_mapping(raw)
    logger.info(f"Loaded level requirement table from {path}")
    return table
