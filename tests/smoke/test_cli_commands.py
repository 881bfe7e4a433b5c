"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work and that
bad input exits with code 1.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import subprocess
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from src.cli.main import app

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

runner = CliRunner()


def run_cli_command(command: str, timeout: int = 30) -> tuple[int, str, str]:
    """
    Run a CLI command in a subprocess and return exit code, stdout, stderr.

    Args:
        command: The command to run (after 'python -m src.cli.main')
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    full_command = f"{sys.executable} -m src.cli.main {command}"

    result = subprocess.run(
        full_command,
        shell=True,
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=timeout,
    )

    return result.returncode, result.stdout, result.stderr


@pytest.fixture
def records_file(tmp_path):
    """Twenty reading records at 78% accuracy."""
    records = [
        {
            "module": "reading",
            "timestamp": (NOW - timedelta(hours=20 - i)).isoformat(),
            "time_spent_seconds": 120,
            "accuracy": 78,
        }
        for i in range(20)
    ]
    path = tmp_path / "records.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


@pytest.fixture
def words_file(tmp_path):
    """Small vocabulary book with one due word."""
    words = [
        {
            "text": "ubiquitous",
            "mastery_level": 3,
            "review_count": 4,
            "correct_count": 3,
            "next_review_due_at": (NOW - timedelta(days=1)).isoformat(),
        },
        {
            "text": "ephemeral",
            "mastery_level": 1,
            "review_count": 1,
            "next_review_due_at": (NOW + timedelta(days=3)).isoformat(),
        },
    ]
    path = tmp_path / "words.json"
    path.write_text(json.dumps(words), encoding="utf-8")
    return path


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should list the command groups."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "assess" in result.stdout
        assert "review" in result.stdout
        assert "score" in result.stdout

    @pytest.mark.parametrize("command", ["assess", "stats", "levels", "review", "score"])
    def test_command_help(self, command):
        """Every command group should have help."""
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0, result.output

    def test_module_entry_point(self):
        """python -m src.cli.main should start."""
        code, stdout, stderr = run_cli_command("--help")

        assert code == 0, f"Help failed: {stderr}"
        assert "assess" in stdout


class TestCLIAssess:
    """Test assessment commands."""

    def test_assess_table(self, records_file):
        result = runner.invoke(app, ["assess", str(records_file), "--today", "2024-05-01"])

        assert result.exit_code == 0, result.output
        assert "Proficiency: A1" in result.stdout
        assert "B1" in result.stdout

    def test_assess_json(self, records_file):
        result = runner.invoke(app, ["assess", str(records_file), "--json"])

        assert result.exit_code == 0, result.output
        body = json.loads(result.stdout)
        assert body["modules"]["reading"]["current_level"] == "B1"
        assert body["overall_level"] == "A1"

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["assess", str(tmp_path / "absent.json")])

        assert result.exit_code == 1
        assert "File not found" in result.stdout

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{not json", encoding="utf-8")

        result = runner.invoke(app, ["assess", str(path)])
        assert result.exit_code == 1

    def test_invalid_record(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps([{"module": "reading", "timestamp": NOW.isoformat(), "accuracy": 140}]),
            encoding="utf-8",
        )

        result = runner.invoke(app, ["assess", str(path)])
        assert result.exit_code == 1
        assert "records.0.accuracy" in result.stdout

    def test_stats(self, records_file):
        result = runner.invoke(app, ["stats", str(records_file), "--today", "2024-05-01"])

        assert result.exit_code == 0, result.output
        assert "Study streak" in result.stdout


class TestCLILevels:
    def test_default_levels(self):
        result = runner.invoke(app, ["levels"])

        assert result.exit_code == 0, result.output
        assert "C2" in result.stdout

    def test_invalid_levels_file(self, tmp_path):
        path = tmp_path / "levels.json"
        path.write_text(json.dumps({"A1": {}}), encoding="utf-8")

        result = runner.invoke(app, ["levels", "--levels", str(path)])
        assert result.exit_code == 1


class TestCLIReview:
    def test_due(self, words_file):
        result = runner.invoke(app, ["review", "due", str(words_file), "--now", "2024-05-01"])

        assert result.exit_code == 0, result.output
        assert "ubiquitous" in result.stdout
        assert "ephemeral" not in result.stdout

    def test_apply_writes_output(self, words_file, tmp_path):
        output = tmp_path / "updated.json"
        result = runner.invoke(
            app,
            [
                "review", "apply", str(words_file), "ubiquitous", "known",
                "--now", "2024-05-01T12:00:00", "--output", str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        saved = {w["text"]: w for w in json.loads(output.read_text(encoding="utf-8"))}
        assert saved["ubiquitous"]["mastery_level"] == 4
        assert saved["ubiquitous"]["review_count"] == 5
        assert saved["ephemeral"]["mastery_level"] == 1

    def test_apply_adds_unknown_word(self, words_file, tmp_path):
        output = tmp_path / "updated.json"
        result = runner.invoke(
            app, ["review", "apply", str(words_file), "Serendipity", "unknown", "-o", str(output)]
        )

        assert result.exit_code == 0, result.output
        texts = [w["text"] for w in json.loads(output.read_text(encoding="utf-8"))]
        assert "serendipity" in texts

    def test_invalid_outcome(self, words_file):
        result = runner.invoke(app, ["review", "apply", str(words_file), "ubiquitous", "maybe"])
        assert result.exit_code != 0

    def test_insights(self, words_file):
        result = runner.invoke(app, ["review", "insights", str(words_file), "--now", "2024-05-01"])

        assert result.exit_code == 0, result.output
        assert "Vocabulary Book" in result.stdout


class TestCLIScore:
    def test_speak_json(self):
        result = runner.invoke(
            app, ["score", "speak", "I like apples", "I like oranges", "-c", "0.8", "--json"]
        )

        assert result.exit_code == 0, result.output
        body = json.loads(result.stdout)
        assert body["overall_score"] == pytest.approx(82.7)

    def test_speak_text(self):
        result = runner.invoke(app, ["score", "speak", "Good morning", "good morning"])

        assert result.exit_code == 0, result.output
        assert "Overall" in result.stdout

    def test_write(self, tmp_path, sample_essay):
        path = tmp_path / "essay.txt"
        path.write_text(sample_essay, encoding="utf-8")

        result = runner.invoke(app, ["score", "write", str(path), "-k", "travel", "--json"])

        assert result.exit_code == 0, result.output
        body = json.loads(result.stdout)
        assert body["word_count"] == 44
        assert body["max_score"] == 100

    def test_write_missing_file(self, tmp_path):
        result = runner.invoke(app, ["score", "write", str(tmp_path / "none.txt")])
        assert result.exit_code == 1
