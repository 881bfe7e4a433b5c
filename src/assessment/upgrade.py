"""
Level Upgrade Decision Engine.

Combines the four module assessments into an overall proficiency picture.

Policy:
- overall level is the minimum module level (a learner is only as
  advanced as their weakest skill)
- an upgrade is possible only when every module has reached 100% progress
  toward its next level
- weakest/strongest modules are the two ends of one ordering by
  (progress, accuracy, module order)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping

from loguru import logger

from src.assessment.evaluator import ModuleAssessment
from src.core.level_table import DEFAULT_LEVEL_TABLE, LevelRequirementTable
from src.core.proficiency import CEFRLevel, SkillModule, Trend

MAX_RECOMMENDATIONS = 5


@dataclass(frozen=True)
class LevelRequirementStatus:
    """Where one module stands against the requirement of the target level."""

    module: SkillModule
    current_accuracy: float
    required_accuracy: float
    current_attempts: int
    minimum_attempts: int
    met: bool
    description: str

    def to_dict(self) -> dict:
        return {
            "module": self.module.value,
            "current_accuracy": self.current_accuracy,
            "required_accuracy": self.required_accuracy,
            "current_attempts": self.current_attempts,
            "minimum_attempts": self.minimum_attempts,
            "met": self.met,
            "description": self.description,
        }


@dataclass(frozen=True)
class LevelUpgrade:
    can_upgrade: bool
    next_level: CEFRLevel | None
    overall_progress: float  # 0-100
    requirements: tuple[LevelRequirementStatus, ...] = ()

    def to_dict(self) -> dict:
        return {
            "can_upgrade": self.can_upgrade,
            "next_level": self.next_level.value if self.next_level else None,
            "overall_progress": self.overall_progress,
            "requirements": [r.to_dict() for r in self.requirements],
        }


@dataclass(frozen=True)
class ProficiencyAssessment:
    """Overall proficiency derived from the four module assessments."""

    overall_level: CEFRLevel
    modules: Mapping[SkillModule, ModuleAssessment]
    level_upgrade: LevelUpgrade
    weakest_module: SkillModule
    strongest_module: SkillModule
    recommendations: tuple[str, ...] = field(default=())

    def to_dict(self) -> dict:
        return {
            "overall_level": self.overall_level.value,
            "modules": {m.value: a.to_dict() for m, a in self.modules.items()},
            "level_upgrade": self.level_upgrade.to_dict(),
            "weakest_module": self.weakest_module.value,
            "strongest_module": self.strongest_module.value,
            "recommendations": list(self.recommendations),
        }


def describe_requirement_gap(
    module: SkillModule,
    accuracy: float,
    attempts: int,
    required_accuracy: float,
    minimum_attempts: int,
) -> str:
    """Readable description of what a module still needs for a level."""
    accuracy_gap = required_accuracy - accuracy
    attempts_gap = minimum_attempts - attempts
    name = module.value

    if accuracy_gap > 0 and attempts_gap > 0:
        return (
            f"{name}: raise accuracy by {accuracy_gap:.1f} points "
            f"and complete {attempts_gap} more attempts"
        )
    if accuracy_gap > 0:
        return f"{name}: raise accuracy by {accuracy_gap:.1f} points"
    if attempts_gap > 0:
        return f"{name}: complete {attempts_gap} more attempts"
    return f"{name}: requirement met"


def requirement_statuses(
    assessments: Mapping[SkillModule, ModuleAssessment],
    target_level: CEFRLevel,
    table: LevelRequirementTable = DEFAULT_LEVEL_TABLE,
) -> tuple[LevelRequirementStatus, ...]:
    """Status of every module against ``target_level``, in module order."""
    statuses = []
    for module in SkillModule:
        assessment = assessments[module]
        req = table.requirement(target_level, module)
        statuses.append(
            LevelRequirementStatus(
                module=module,
                current_accuracy=assessment.accuracy,
                required_accuracy=req.accuracy,
                current_attempts=assessment.total_attempts,
                minimum_attempts=req.minimum_attempts,
                met=req.is_met(assessment.accuracy, assessment.total_attempts),
                description=describe_requirement_gap(
                    module,
                    assessment.accuracy,
                    assessment.total_attempts,
                    req.accuracy,
                    req.minimum_attempts,
                ),
            )
        )
    return tuple(statuses)


def _rank_key(assessment: ModuleAssessment) -> tuple[float, float, int]:
    return (assessment.progress, assessment.accuracy, assessment.module.order)


def _index_assessments(
    assessments: Mapping[SkillModule, ModuleAssessment] | Iterable[ModuleAssessment],
) -> dict[SkillModule, ModuleAssessment]:
    if isinstance(assessments, Mapping):
        return {SkillModule(m): a for m, a in assessments.items()}
    return {a.module: a for a in assessments}


def decide(
    assessments: Mapping[SkillModule, ModuleAssessment] | Iterable[ModuleAssessment],
    table: LevelRequirementTable = DEFAULT_LEVEL_TABLE,
) -> ProficiencyAssessment:
    """
    Decide the overall level and whether the learner can move up.

    Args:
        assessments: Exactly one ModuleAssessment per skill module
        table: Level requirement table used for the requirement statuses

    Returns:
        ProficiencyAssessment with recommendations attached
    """
    indexed = _index_assessments(assessments)
    assert set(indexed) == set(SkillModule), (
        f"expected one assessment per skill module, got {sorted(m.value for m in indexed)}"
    )

    ordered = [indexed[m] for m in SkillModule]

    overall_level = min(a.current_level for a in ordered)
    next_level = overall_level.next()
    overall_progress = sum(a.progress for a in ordered) / len(ordered)
    can_upgrade = next_level is not None and all(a.progress >= 100.0 for a in ordered)

    requirements: tuple[LevelRequirementStatus, ...] = ()
    if next_level is not None:
        requirements = requirement_statuses(indexed, next_level, table)

    ranked = sorted(ordered, key=_rank_key)

    decision = ProficiencyAssessment(
        overall_level=overall_level,
        modules={a.module: a for a in ordered},
        level_upgrade=LevelUpgrade(
            can_upgrade=can_upgrade,
            next_level=next_level,
            overall_progress=overall_progress,
            requirements=requirements,
        ),
        weakest_module=ranked[0].module,
        strongest_module=ranked[-1].module,
    )
    decision = replace(decision, recommendations=tuple(upgrade_recommendations(decision)))

    logger.info(
        f"Overall level {overall_level.value}, progress {overall_progress:.1f}%, "
        f"can_upgrade={can_upgrade}"
    )
    return decision


def upgrade_recommendations(assessment: ProficiencyAssessment) -> list[str]:
    """
    Short practice recommendations for an assessment (at most 5).

    Order: weakest module focus, up to two unmet requirements (when no
    upgrade is possible yet), then modules whose recent trend is down.
    """
    recommendations: list[str] = []

    weakest = assessment.modules[assessment.weakest_module]
    recommendations.append(
        f"Focus on {assessment.weakest_module.display_name.lower()}: "
        f"current accuracy is {weakest.accuracy:.1f}%"
    )

    upgrade = assessment.level_upgrade
    if not upgrade.can_upgrade and upgrade.next_level is not None:
        unmet = [r for r in upgrade.requirements if not r.met]
        recommendations.extend(r.description for r in unmet[:2])

    for module in SkillModule:
        if assessment.modules[module].recent_trend is Trend.DOWN:
            recommendations.append(
                f"{module.display_name} performance has dropped recently; schedule extra practice"
            )

    return recommendations[:MAX_RECOMMENDATIONS]
