"""Tests for settings loaded from the environment."""

from decimal import Decimal

import pytest

from payroll_time_sync.calculators.rounding import RoundingRule
from payroll_time_sync.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in (
            "PORT",
            "DEBUG",
            "LOG_LEVEL",
            "DEFAULT_OVERTIME_THRESHOLD_PER_DAY",
            "DEFAULT_ROUNDING_RULE",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()
        assert settings.port == 8000
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.default_overtime_threshold_per_day == Decimal("8")
        assert settings.default_rounding_rule == "nearest_15"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./sync.db")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("DEFAULT_OVERTIME_THRESHOLD_PER_DAY", "10")
        monkeypatch.setenv("DEFAULT_ROUNDING_RULE", "up_30")

        settings = get_settings()
        assert settings.database_url == "sqlite+aiosqlite:///./sync.db"
        assert settings.debug is True
        assert settings.log_level == "DEBUG"

        options = settings.default_sync_options()
        assert options.overtime_threshold_per_day == Decimal("10")
        assert options.rounding_rule is RoundingRule.UP_30

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()

    def test_invalid_rounding_rule(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_ROUNDING_RULE", "sometimes")
        with pytest.raises(ValueError):
            Settings.from_env().default_sync_options()
