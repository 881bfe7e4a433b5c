"""
Integration Tests for the REST API.

Exercises the FastAPI application in-process through TestClient:
1. Health and level table endpoints
2. Assessment and statistics from activity records
3. Review scheduling for vocabulary entries
4. Pronunciation and writing scores
"""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import level_table_dependency
from src.api.main import app
from src.core.level_table import LevelTableConfigError

pytestmark = pytest.mark.integration

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def client():
    """TestClient without running the lifespan handler."""
    yield TestClient(app)
    app.dependency_overrides.clear()


def _records(module: str, accuracies, start=None):
    start = start or NOW - timedelta(hours=len(accuracies))
    return [
        {
            "module": module,
            "timestamp": (start + timedelta(hours=i)).isoformat(),
            "time_spent_seconds": 60,
            "accuracy": accuracy,
        }
        for i, accuracy in enumerate(accuracies)
    ]


def _word(text="ubiquitous", mastery_level=0, review_count=0, due_in=timedelta(0), **extra):
    return {
        "text": text,
        "mastery_level": mastery_level,
        "review_count": review_count,
        "next_review_due_at": (NOW + due_in).isoformat(),
        **extra,
    }


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value)


class TestHealth:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "fluentpath-engine"

    def test_health_reports_level_table(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["components"]["level_table"] == "ok"
        assert body["config"]["trend_window"] == 3

    def test_levels(self, client):
        body = client.get("/api/levels").json()

        assert set(body) == {"A1", "A2", "B1", "B2", "C1", "C2"}
        assert body["B1"]["reading"] == {"accuracy": 75, "minimum_attempts": 20}

    def test_broken_level_table_returns_500(self, client):
        def broken():
            raise LevelTableConfigError("Thresholds for reading decrease at level B2")

        app.dependency_overrides[level_table_dependency] = broken
        response = client.get("/api/levels")

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Configuration error")


class TestAssessment:
    def test_reading_practice_assessed(self, client):
        payload = {"records": _records("reading", [78] * 20), "today": "2024-05-01"}
        body = client.post("/api/assessment", json=payload).json()

        reading = body["modules"]["reading"]
        assert reading["current_level"] == "B1"
        assert reading["next_level_requirement"]["current_progress"] == pytest.approx(80.0)
        assert body["overall_level"] == "A1"
        assert body["weakest_module"] == "listening"
        assert body["strongest_module"] == "reading"
        assert body["level_upgrade"]["can_upgrade"] is False
        assert body["recommendations"]

    def test_bare_list_accepted(self, client):
        response = client.post("/api/assessment", json=_records("writing", [60, 70]))

        assert response.status_code == 200
        assert response.json()["modules"]["writing"]["total_attempts"] == 2

    def test_empty_records(self, client):
        body = client.post("/api/assessment", json={"records": []}).json()

        assert body["overall_level"] == "A1"
        assert body["level_upgrade"]["overall_progress"] == 0.0

    def test_inverted_window_rejected(self, client):
        payload = {
            "records": [],
            "window": {"start": NOW.isoformat(), "end": (NOW - timedelta(days=1)).isoformat()},
        }
        assert client.post("/api/assessment", json=payload).status_code == 422

    def test_out_of_range_accuracy_rejected(self, client):
        payload = {"records": _records("reading", [150])}
        assert client.post("/api/assessment", json=payload).status_code == 422

    def test_unknown_module_rejected(self, client):
        payload = {"records": _records("grammar", [50])}
        assert client.post("/api/assessment", json=payload).status_code == 422

    def test_stats(self, client):
        records = _records("reading", [40, 80]) + [
            {"module": "translation", "timestamp": NOW.isoformat(), "time_spent_seconds": 5}
        ]
        body = client.post(
            "/api/assessment/stats", json={"records": records, "today": "2024-05-01"}
        ).json()

        assert body["overall"]["total_attempts"] == 2
        assert body["overall"]["average_accuracy"] == pytest.approx(60.0)
        assert body["overall"]["counts_by_module"]["translation"] == 1
        assert body["overall"]["streak_days"] == 1
        assert body["modules"]["reading"]["correct_attempts"] == 1
        assert set(body["modules"]) == {"reading", "listening", "speaking", "writing"}


class TestReview:
    def test_known_word_scheduled_on_long_band(self, client):
        payload = {
            "entry": _word(mastery_level=3, review_count=4, correct_count=2),
            "outcome": "known",
            "now": NOW.isoformat(),
        }
        body = client.post("/api/review/apply", json=payload).json()

        assert body["entry"]["mastery_level"] == 4
        assert body["interval_seconds"] == 20 * 86400
        assert _parse(body["entry"]["next_review_due_at"]) == NOW + timedelta(days=20)
        assert body["interval_description"] == "in 3 weeks"
        assert body["warnings"] == []

    def test_out_of_range_mastery_warns(self, client):
        payload = {"entry": _word(mastery_level=9), "outcome": "familiar", "now": NOW.isoformat()}
        body = client.post("/api/review/apply", json=payload).json()

        assert body["entry"]["mastery_level"] == 5
        assert len(body["warnings"]) == 1

    def test_invalid_outcome_rejected(self, client):
        payload = {"entry": _word(), "outcome": "maybe", "now": NOW.isoformat()}
        assert client.post("/api/review/apply", json=payload).status_code == 422

    def test_due_queue(self, client):
        words = [
            _word("later", review_count=1, due_in=timedelta(days=2)),
            _word("fresh", due_in=timedelta(days=-3)),
            _word("seen", mastery_level=2, review_count=3, due_in=timedelta(days=-1)),
        ]
        body = client.post(
            "/api/review/due", json={"words": words, "now": NOW.isoformat()}
        ).json()

        assert body["total_due"] == 2
        assert [w["entry"]["text"] for w in body["words"]] == ["seen", "fresh"]
        assert body["words"][0]["priority"] == pytest.approx(1.3)
        assert body["words"][1]["forgetting_probability"] == 1.0

    def test_due_queue_limit(self, client):
        words = [_word(f"w{i}", review_count=1, due_in=timedelta(hours=-i)) for i in range(4)]
        body = client.post(
            "/api/review/due", json={"words": words, "now": NOW.isoformat(), "limit": 2}
        ).json()

        assert body["total_due"] == 4
        assert len(body["words"]) == 2

    def test_insights(self, client):
        words = [
            _word("a", mastery_level=5, review_count=5, correct_count=5, due_in=timedelta(days=10)),
            _word("b", add_reason="translation_lookup"),
        ]
        body = client.post(
            "/api/review/insights", json={"words": words, "now": NOW.isoformat()}
        ).json()

        assert body["total_words"] == 2
        assert body["mastered_words"] == 1
        assert body["due_now"] == 1
        assert body["by_reason"]["translation_lookup"] == 1


class TestScoring:
    def test_pronunciation(self, client):
        payload = {"original": "I like apples", "spoken": "I like oranges", "confidence": 0.8}
        body = client.post("/api/scoring/pronunciation", json=payload).json()

        assert body["overall_score"] == pytest.approx(82.7)
        assert body["sub_scores"]["accuracy"] == pytest.approx(66.7)
        assert body["mistakes"][0]["position"] == 2

    def test_writing_default_rubric(self, client):
        essay = "Travel is great. It teaches us a lot.\n\nEveryone should travel!"
        body = client.post("/api/scoring/writing", json={"content": essay}).json()

        assert body["max_score"] == 100
        assert len(body["criteria_scores"]) == 5
        assert 0 <= body["overall_score"] <= 100

    def test_writing_custom_rubric(self, client):
        payload = {
            "content": "A short answer.",
            "rubric": [{"id": "style", "name": "Style", "max_points": 10}],
        }
        body = client.post("/api/scoring/writing", json=payload).json()

        assert body["max_score"] == 10
        assert body["criteria_scores"][0]["score"] == 8

    def test_writing_invalid_rubric_rejected(self, client):
        payload = {"content": "Text.", "rubric": [{"id": "x", "name": "X", "max_points": 0}]}
        assert client.post("/api/scoring/writing", json=payload).status_code == 422
