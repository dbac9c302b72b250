"""Tests for environment configuration and logging setup."""

import logging
from pathlib import Path
from unittest.mock import patch

from banking_client.config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_AUTH_BASE_URL,
    load_config,
)
from banking_client.logging import configure_logging

ENV_VARS = (
    "BANK_API_BASE_URL",
    "BANK_AUTH_BASE_URL",
    "BANK_API_TIMEOUT",
    "BANK_NOTIFICATION_POLL_SECONDS",
    "BANK_SESSION_PATH",
    "BANK_LOG_LEVEL",
    "BANK_PORTAL_CONFIG_PATH",
)


def _clear_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self, monkeypatch):
        _clear_env(monkeypatch)

        config = load_config()

        assert config.api_base_url == DEFAULT_API_BASE_URL
        assert config.auth_base_url == DEFAULT_AUTH_BASE_URL
        assert config.timeout_seconds == 10.0
        assert config.notification_poll_seconds == 60.0
        assert config.log_level == "INFO"
        assert config.session_path == Path("~/.bank_portal/session.json").expanduser()

    def test_env_overrides(self, monkeypatch, tmp_path):
        _clear_env(monkeypatch)
        monkeypatch.setenv("BANK_API_BASE_URL", "https://bank.example.com/api/")
        monkeypatch.setenv("BANK_AUTH_BASE_URL", "https://bank.example.com/auth")
        monkeypatch.setenv("BANK_API_TIMEOUT", "2.5")
        monkeypatch.setenv("BANK_NOTIFICATION_POLL_SECONDS", "15")
        monkeypatch.setenv("BANK_SESSION_PATH", str(tmp_path / "s.json"))
        monkeypatch.setenv("BANK_LOG_LEVEL", "debug")

        config = load_config()

        assert config.api_base_url == "https://bank.example.com/api"
        assert config.auth_base_url == "https://bank.example.com/auth"
        assert config.timeout_seconds == 2.5
        assert config.notification_poll_seconds == 15.0
        assert config.session_path == tmp_path / "s.json"
        assert config.log_level == "DEBUG"

    def test_invalid_numbers_fall_back(self, monkeypatch):
        _clear_env(monkeypatch)
        monkeypatch.setenv("BANK_API_TIMEOUT", "soon")
        monkeypatch.setenv("BANK_NOTIFICATION_POLL_SECONDS", "-5")

        config = load_config()

        assert config.timeout_seconds == 10.0
        assert config.notification_poll_seconds == 60.0

    def test_env_file_does_not_override_environment(self, monkeypatch, tmp_path):
        _clear_env(monkeypatch)
        env_file = tmp_path / "portal.env"
        env_file.write_text(
            "# portal settings\n"
            'BANK_API_BASE_URL="http://from-file/api"\n'
            "BANK_LOG_LEVEL=warning\n"
        )
        monkeypatch.setenv("BANK_PORTAL_CONFIG_PATH", str(env_file))
        monkeypatch.setenv("BANK_LOG_LEVEL", "ERROR")
        # register the key so the value the file writes is undone on teardown
        monkeypatch.setenv("BANK_API_BASE_URL", "http://placeholder")
        monkeypatch.delenv("BANK_API_BASE_URL")

        config = load_config()

        assert config.api_base_url == "http://from-file/api"
        assert config.log_level == "ERROR"
        assert config.config_path == str(env_file)

    def test_missing_env_file_is_ignored(self, monkeypatch, tmp_path):
        _clear_env(monkeypatch)
        monkeypatch.setenv("BANK_PORTAL_CONFIG_PATH", str(tmp_path / "absent.env"))

        config = load_config()

        assert config.api_base_url == DEFAULT_API_BASE_URL


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_level_and_quiets_urllib3(self):
        with patch("banking_client.logging.logging.basicConfig") as mock_basic:
            configure_logging("debug")

        assert mock_basic.call_args.kwargs["level"] == logging.DEBUG
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_unknown_level_defaults_to_info(self):
        with patch("banking_client.logging.logging.basicConfig") as mock_basic:
            configure_logging("chatty")

        assert mock_basic.call_args.kwargs["level"] == logging.INFO
