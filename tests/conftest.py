"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.proficiency import ActivityModule  # noqa: E402
from src.core.records import ActivityRecord  # noqa: E402
from src.wordbook.scheduler import VocabularyEntry  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (FastAPI app in-process)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """Fixed reference time for scheduling and streak tests."""
    return datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def make_records(now):
    """
    Build graded records for one module, one per hour going back from ``now``.

    Usage:
        make_records(ActivityModule.READING, [70, 80, 90])
    """

    def _make(module: ActivityModule, accuracies, start: datetime | None = None):
        start = start or now - timedelta(hours=len(accuracies))
        return [
            ActivityRecord(
                module=module,
                timestamp=start + timedelta(hours=i),
                time_spent_seconds=60.0,
                accuracy=accuracy,
            )
            for i, accuracy in enumerate(accuracies)
        ]

    return _make


@pytest.fixture
def make_entry(now):
    """Build a vocabulary entry with sensible defaults relative to ``now``."""

    def _make(
        text: str = "ubiquitous",
        mastery_level: int = 0,
        review_count: int = 0,
        correct_count: int = 0,
        due_in: timedelta = timedelta(0),
        last_reviewed_ago: timedelta | None = None,
    ) -> VocabularyEntry:
        return VocabularyEntry(
            text=text,
            next_review_due_at=now + due_in,
            mastery_level=mastery_level,
            review_count=review_count,
            correct_count=correct_count,
            last_reviewed_at=now - last_reviewed_ago if last_reviewed_ago is not None else None,
        )

    return _make


@pytest.fixture
def sample_essay():
    """Provide a three-paragraph essay for writing scorer tests."""
    return (
        "Travel teaches us about other cultures. It opens our minds to new ideas.\n\n"
        "When I visited Lisbon, I tried local food and spoke with residents. "
        "Every conversation showed me something surprising.\n\n"
        "In conclusion, travel is a valuable way to learn. Everyone should try it!"
    )
