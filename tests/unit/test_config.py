"""
Unit tests for settings loading and log sink setup.
"""

import json

import pytest
from loguru import logger
from pydantic import ValidationError

from config import Settings
from src.core.level_table import DEFAULT_LEVEL_TABLE, LevelTableConfigError
from src.core.log_setup import configure_logging


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.correct_accuracy_threshold == 50.0
        assert settings.get_assessment_config() == {
            "correct_threshold": 50.0,
            "trend_window": 3,
            "trend_threshold": 2.0,
        }
        assert settings.get_level_table() is DEFAULT_LEVEL_TABLE

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TREND_WINDOW", "5")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)
        assert settings.trend_window == 5
        assert settings.log_level == "DEBUG"

    def test_invalid_threshold_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, correct_accuracy_threshold=120)

    def test_level_table_from_file(self, tmp_path):
        raw = DEFAULT_LEVEL_TABLE.to_dict()
        raw["A1"]["writing"]["accuracy"] = 40
        path = tmp_path / "levels.json"
        path.write_text(json.dumps(raw), encoding="utf-8")

        settings = Settings(_env_file=None, level_requirements_path=str(path))
        assert settings.get_level_table().to_dict()["A1"]["writing"]["accuracy"] == 40

    def test_broken_level_table_file(self, tmp_path):
        path = tmp_path / "levels.json"
        path.write_text(json.dumps({"A1": {}}), encoding="utf-8")

        settings = Settings(_env_file=None, level_requirements_path=str(path))
        with pytest.raises(LevelTableConfigError):
            settings.get_level_table()


class TestLogging:
    def test_file_sink_receives_messages(self, tmp_path):
        log_file = tmp_path / "engine.log"
        settings = Settings(_env_file=None, log_file=str(log_file), log_level="INFO")

        configure_logging(settings)
        logger.info("assessment finished")
        logger.remove()

        assert "assessment finished" in log_file.read_text(encoding="utf-8")
