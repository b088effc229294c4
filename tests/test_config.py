"""Tests for environment-driven settings."""

import sys
import pytest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.config import (
    ConfigError, ConfigIssue, Settings, load_settings, validate_settings,
)


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings(env={})
        assert settings.openweather_api_key is None
        assert settings.function_base_path == "/.netlify/functions/api"
        assert settings.rain_history_year == 2023
        assert settings.http_timeout == 30.0
        assert settings.log_level == "INFO"

    def test_overrides(self):
        settings = load_settings(env={
            "OPENWEATHER_API_KEY": " abc123 ",
            "FUNCTION_BASE_PATH": "/api/",
            "RAIN_HISTORY_YEAR": "2022",
            "HTTP_TIMEOUT_SECONDS": "5.5",
            "NOMINATIM_USER_AGENT": "dashboard-test/0.1",
            "LOG_LEVEL": "debug",
        })
        assert settings.openweather_api_key == "abc123"
        assert settings.function_base_path == "/api"
        assert settings.rain_history_year == 2022
        assert settings.http_timeout == 5.5
        assert settings.nominatim_user_agent == "dashboard-test/0.1"
        assert settings.log_level == "DEBUG"

    def test_blank_key_is_unset(self):
        assert load_settings(env={"OPENWEATHER_API_KEY": "  "}).openweather_api_key is None

    def test_bad_year_raises(self):
        with pytest.raises(ConfigError, match="RAIN_HISTORY_YEAR"):
            load_settings(env={"RAIN_HISTORY_YEAR": "last year"})

    def test_non_positive_timeout_raises(self):
        with pytest.raises(ConfigError, match="HTTP_TIMEOUT_SECONDS"):
            load_settings(env={"HTTP_TIMEOUT_SECONDS": "0"})


class TestValidateSettings:
    def test_missing_key_reported(self):
        issues = validate_settings(Settings())
        assert issues == [ConfigIssue(
            setting="OPENWEATHER_API_KEY",
            message="OpenWeather API key not set; /weather will return 500",
        )]

    def test_complete_settings_have_no_issues(self):
        assert validate_settings(Settings(openweather_api_key="k")) == []
