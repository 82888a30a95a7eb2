"""Tests for environment configuration."""
import logging

import pytest

from slack_mcp.config import DEFAULT_API_BASE_URL, load_settings
from slack_mcp.errors import ConfigurationError

REQUIRED = {"SLACK_BOT_TOKEN": "xoxb-1", "SLACK_TEAM_ID": "T1"}


class TestLoadSettings:
    def test_minimal_environment(self):
        settings = load_settings(dict(REQUIRED))

        assert settings.bot_token == "xoxb-1"
        assert settings.team_id == "T1"
        assert settings.user_token is None
        assert not settings.has_user_token
        assert settings.log_level == "info"
        assert settings.logging_level == logging.INFO
        assert settings.api_base_url == DEFAULT_API_BASE_URL
        assert settings.http_timeout == 30.0

    def test_all_variables(self):
        settings = load_settings({
            **REQUIRED,
            "SLACK_USER_TOKEN": "xoxp-1",
            "LOG_LEVEL": "DEBUG",
            "SLACK_API_BASE_URL": "http://localhost:8080/api/",
            "SLACK_HTTP_TIMEOUT": "5",
        })

        assert settings.has_user_token
        assert settings.logging_level == logging.DEBUG
        assert settings.api_base_url == "http://localhost:8080/api"
        assert settings.http_timeout == 5.0

    def test_empty_user_token_is_unset(self):
        settings = load_settings({**REQUIRED, "SLACK_USER_TOKEN": ""})

        assert settings.user_token is None

    @pytest.mark.parametrize("value, level", [
        ("warn", logging.WARNING),
        ("warning", logging.WARNING),
        ("error", logging.ERROR),
        (" Info ", logging.INFO),
    ])
    def test_log_levels(self, value, level):
        assert load_settings({**REQUIRED, "LOG_LEVEL": value}).logging_level == level

    def test_both_required_missing(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings({})

        assert str(exc_info.value) == "Please set SLACK_BOT_TOKEN and SLACK_TEAM_ID environment variables"
        assert exc_info.value.missing == ["SLACK_BOT_TOKEN", "SLACK_TEAM_ID"]

    def test_one_required_missing(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings({"SLACK_BOT_TOKEN": "xoxb-1"})

        assert str(exc_info.value) == "Please set SLACK_TEAM_ID environment variable"

    def test_unknown_log_level(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings({**REQUIRED, "LOG_LEVEL": "verbose"})

        assert "LOG_LEVEL" in str(exc_info.value)

    @pytest.mark.parametrize("value", ["0", "-1", "soon"])
    def test_bad_timeout(self, value):
        with pytest.raises(ConfigurationError):
            load_settings({**REQUIRED, "SLACK_HTTP_TIMEOUT": value})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-env")
        monkeypatch.setenv("SLACK_TEAM_ID", "T-env")
        for name in ("SLACK_USER_TOKEN", "LOG_LEVEL", "SLACK_API_BASE_URL", "SLACK_HTTP_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

        settings = load_settings(load_env_file=False)

        assert settings.bot_token == "xoxb-env"
        assert settings.team_id == "T-env"

    def test_settings_are_frozen(self):
        settings = load_settings(dict(REQUIRED))

        with pytest.raises(ValueError):
            settings.bot_token = "other"
