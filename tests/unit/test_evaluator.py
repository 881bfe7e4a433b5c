"""
Unit tests for the module assessment evaluator.

Covers level placement, next-level progress and trend detection.
"""

import pytest

from src.assessment.aggregator import AggregateResult, aggregate
from src.assessment.evaluator import (
    calculate_progress,
    detect_trend,
    determine_level,
    evaluate,
    evaluate_all,
)
from src.core.proficiency import ActivityModule, CEFRLevel, SkillModule, Trend


def _stats(accuracy: float, attempts: int, accuracies=()) -> AggregateResult:
    return AggregateResult(
        total_attempts=attempts,
        correct_attempts=attempts,
        average_accuracy=accuracy,
        graded_accuracies=tuple(accuracies),
    )


class TestLevelPlacement:
    def test_reading_at_b1_with_progress_toward_b2(self):
        assessment = evaluate(SkillModule.READING, _stats(78, 20))

        assert assessment.current_level is CEFRLevel.B1
        assert assessment.next_level is CEFRLevel.B2
        assert assessment.next_level_requirement.target_accuracy == 80
        assert assessment.next_level_requirement.minimum_attempts == 25
        # min(78/80, 20/25) = 0.8
        assert assessment.progress == pytest.approx(80.0)

    def test_no_records_gives_a1_with_zero_progress(self):
        assessment = evaluate(SkillModule.LISTENING, aggregate([]))

        assert assessment.current_level is CEFRLevel.A1
        assert assessment.progress == 0.0
        assert assessment.recent_trend is Trend.STABLE
        assert assessment.total_attempts == 0

    def test_first_unmet_level_stops_the_walk(self):
        # Accuracy clears C2 but attempts only clear A1 (10); A2 needs 15
        assessment = evaluate(SkillModule.READING, _stats(95, 12))

        assert assessment.current_level is CEFRLevel.A1
        # min(95/70, 12/15) = 0.8
        assert assessment.progress == pytest.approx(80.0)

    def test_top_level_has_no_next_requirement(self):
        assessment = evaluate(SkillModule.READING, _stats(95, 40))

        assert assessment.current_level is CEFRLevel.C2
        assert assessment.next_level is None
        assert assessment.next_level_requirement.target_accuracy is None
        assert assessment.next_level_requirement.minimum_attempts is None
        assert assessment.progress == 100.0

    def test_level_never_decreases_as_stats_improve(self):
        previous = CEFRLevel.A1
        for accuracy, attempts in [(40, 3), (55, 8), (62, 12), (72, 17), (78, 22), (86, 31), (92, 40)]:
            level = determine_level(SkillModule.READING, accuracy, attempts)
            assert level >= previous
            previous = level

    def test_evaluate_is_idempotent(self):
        stats = _stats(71, 18, [60, 65, 70, 75, 80, 85])
        assert evaluate(SkillModule.SPEAKING, stats) == evaluate(SkillModule.SPEAKING, stats)

    @pytest.mark.parametrize(
        "accuracy,attempts",
        [(0, 0), (100, 0), (0, 100), (100, 100), (50, 7), (99.9, 1000)],
    )
    def test_progress_within_bounds(self, accuracy, attempts):
        progress = evaluate(SkillModule.WRITING, _stats(accuracy, attempts)).progress
        assert 0.0 <= progress <= 100.0


class TestCalculateProgress:
    def test_slower_dimension_bottlenecks(self):
        assert calculate_progress(40, 25, 80, 25) == pytest.approx(50.0)

    def test_zero_target_counts_as_satisfied(self):
        assert calculate_progress(50, 10, 0, 20) == pytest.approx(50.0)

    def test_zero_minimum_counts_as_satisfied(self):
        assert calculate_progress(40, 0, 80, 0) == pytest.approx(50.0)

    def test_capped_at_100(self):
        assert calculate_progress(100, 100, 50, 10) == 100.0


class TestTrend:
    def test_fewer_than_six_is_stable(self):
        assert detect_trend([10, 20, 90, 95, 99]) is Trend.STABLE

    def test_rising_accuracy_is_up(self):
        assert detect_trend([50, 50, 50, 60, 60, 60]) is Trend.UP

    def test_falling_accuracy_is_down(self):
        assert detect_trend([60, 60, 60, 50, 50, 50]) is Trend.DOWN

    def test_difference_of_exactly_threshold_is_stable(self):
        assert detect_trend([50, 50, 50, 52, 52, 52]) is Trend.STABLE

    def test_only_latest_six_considered(self):
        assert detect_trend([0, 0, 0, 70, 70, 70, 70, 70, 70]) is Trend.STABLE

    def test_evaluate_uses_graded_history(self):
        stats = _stats(70, 6, [80, 80, 80, 60, 60, 60])
        assert evaluate(SkillModule.READING, stats).recent_trend is Trend.DOWN


class TestEvaluateAll:
    def test_assesses_all_four_modules(self, make_records):
        records = make_records(ActivityModule.READING, [78] * 20)
        assessments = evaluate_all(records)

        assert set(assessments) == set(SkillModule)
        assert assessments[SkillModule.READING].current_level is CEFRLevel.B1
        assert assessments[SkillModule.WRITING].current_level is CEFRLevel.A1
        assert assessments[SkillModule.WRITING].progress == 0.0
