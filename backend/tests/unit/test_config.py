"""Unit tests for Settings

Tests cover:
- Defaults matching EngineConfig
- Environment overrides
- Bounds validation
- Every setting documented, no stray DEBUG flag
"""

import pytest
from pydantic import ValidationError

from config import Settings
from domain.memory import EngineConfig


class TestSettings:

    def test_defaults_match_engine_config(self, monkeypatch):
        monkeypatch.delenv("AUTO_APPROVE_THRESHOLD", raising=False)
        settings = Settings(_env_file=None)

        assert settings.engine_config() == EngineConfig()

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("AUTO_APPROVE_THRESHOLD", "0.85")
        monkeypatch.setenv("DUPLICATE_WINDOW_DAYS", "5")

        config = Settings(_env_file=None).engine_config()

        assert config.auto_approve_threshold == 0.85
        assert config.duplicate_window_days == 5
        assert config.po_match_window_days == 30

    def test_threshold_out_of_range_rejected(self, monkeypatch):
        monkeypatch.setenv("AUTO_APPROVE_THRESHOLD", "1.5")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_negative_window_rejected(self, monkeypatch):
        monkeypatch.setenv("PO_MATCH_WINDOW_DAYS", "-1")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_database_url_from_environment(self):
        """conftest points the application at in-memory SQLite"""
        assert Settings(_env_file=None).DATABASE_URL == "sqlite://"

    def test_every_setting_is_documented(self):
        for name in Settings.model_fields:
            assert f"{name}:" in Settings.__doc__

    def test_debug_is_not_a_setting(self, monkeypatch):
        """DEBUG is not read; the environment name drives reload behavior"""
        monkeypatch.setenv("DEBUG", "true")

        assert not hasattr(Settings(_env_file=None), "DEBUG")
