"""Tests for the configuration module."""

from pathlib import Path

import pytest

from notification_system.config import (
    AppConfig,
    ConfigurationError,
    load_config,
    load_environment_config,
    validate_config_file,
)
from notification_system.config.validators import check_for_warnings

EXAMPLE_CONFIG = Path(__file__).parent.parent / "config.example.yaml"


@pytest.fixture
def in_empty_dir(tmp_path, monkeypatch):
    """Run from a directory without config.yaml."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestConfigurationLoading:
    """Test configuration loading from YAML files."""

    def test_defaults_when_no_file(self, in_empty_dir, mock_env_vars):
        app_config, env_config = load_config()

        assert app_config.mail.max_retries == 3
        assert app_config.mail.retry_delay_ms == 1000
        assert app_config.retry_delay_seconds == 1.0
        assert app_config.broker.topic == "user-events"
        assert app_config.broker.consumer_group == "notification-service"
        assert app_config.http.port == 8080
        assert app_config.logging.level == "INFO"
        assert app_config.logging.format == "key-value"
        assert env_config.smtp_host == "smtp.test.com"

    def test_load_example_config(self, mock_env_vars):
        app_config, _ = load_config(EXAMPLE_CONFIG)

        assert app_config == AppConfig()

    def test_load_custom_values(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            """
mail:
  max_retries: 5
  retry_delay_ms: 250
broker:
  topic: "  staging-user-events  "
logging:
  format: json
"""
        )

        app_config, _ = load_config(config_file)

        assert app_config.mail.max_retries == 5
        assert app_config.retry_delay_seconds == 0.25
        assert app_config.broker.topic == "staging-user-events"
        assert app_config.logging.format == "json"

    def test_default_location_is_used(self, in_empty_dir, mock_env_vars):
        (in_empty_dir / "config.yaml").write_text("http:\n  port: 9000\n")

        app_config, _ = load_config()

        assert app_config.http.port == 9000

    def test_empty_file_uses_defaults(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        app_config, _ = load_config(config_file)

        assert app_config == AppConfig()

    def test_missing_explicit_file(self, tmp_path, mock_env_vars):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("mail: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Failed to parse YAML"):
            load_config(config_file)

    def test_top_level_must_be_mapping(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_file)

    @pytest.mark.parametrize(
        "content",
        [
            "mail:\n  max_retries: 0\n",
            "mail:\n  retry_delay_ms: -1\n",
            "http:\n  port: 70000\n",
            "logging:\n  level: VERBOSE\n",
            "broker:\n  topic: '   '\n",
        ],
    )
    def test_invalid_values(self, tmp_path, mock_env_vars, content):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(content)

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file)

        assert exc_info.value.errors

    def test_validate_config_file(self, tmp_path):
        """Test the standalone config validation utility."""
        assert validate_config_file(EXAMPLE_CONFIG) is True

        invalid = tmp_path / "invalid.yaml"
        invalid.write_text("mail:\n  max_retries: 99\n")
        assert validate_config_file(invalid) is False


class TestWarnings:
    def test_no_warnings_for_defaults(self):
        assert check_for_warnings({}) == []

    def test_warnings_collected(self):
        messages = check_for_warnings(
            {
                "mail": {"max_retries": 1, "retry_delay_ms": 20000, "use_tls": False},
                "broker": {"block_ms": 10000},
            }
        )

        assert len(messages) == 4

    def test_warnings_emitted_on_load(self, tmp_path, mock_env_vars):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("mail:\n  use_tls: false\n")

        with pytest.warns(UserWarning, match="use_tls"):
            load_config(config_file)


class TestEnvironmentConfig:
    """Test environment variable loading."""

    def test_required_and_defaults(self, mock_env_vars):
        env_config = load_environment_config()

        assert env_config.smtp_host == "smtp.test.com"
        assert env_config.smtp_port == 587
        assert env_config.has_smtp_credentials
        assert env_config.mail_from == "raushangalin@yandex.ru"
        assert env_config.redis_url == "redis://localhost:6379/0"
        assert env_config.database_url == "sqlite:///./data/users.db"
        assert env_config.log_level is None

    def test_overrides(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("MAIL_FROM", "noreply@yandex.ru")
        monkeypatch.setenv("REDIS_URL", "redis://redis:6379/1")
        monkeypatch.setenv("DATABASE_URL", "sqlite:////var/lib/users.db")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        env_config = load_environment_config()

        assert env_config.mail_from == "noreply@yandex.ru"
        assert env_config.redis_url == "redis://redis:6379/1"
        assert env_config.database_url == "sqlite:////var/lib/users.db"
        assert env_config.log_level == "DEBUG"

    def test_missing_required(self, monkeypatch):
        monkeypatch.delenv("SMTP_HOST", raising=False)
        monkeypatch.delenv("SMTP_PORT", raising=False)

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert any("SMTP_HOST" in e for e in exc_info.value.errors)
        assert any("SMTP_PORT" in e for e in exc_info.value.errors)

    @pytest.mark.parametrize("port", ["abc", "0", "70000"])
    def test_invalid_port(self, mock_env_vars, monkeypatch, port):
        monkeypatch.setenv("SMTP_PORT", port)

        with pytest.raises(ConfigurationError, match="SMTP_PORT"):
            load_environment_config()

    def test_invalid_mail_from(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("MAIL_FROM", "not-an-address")

        with pytest.raises(ConfigurationError, match="MAIL_FROM"):
            load_environment_config()

    def test_invalid_log_level(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError, match="LOG_LEVEL"):
            load_environment_config()

    def test_credentials_must_come_in_pairs(self, mock_env_vars, monkeypatch):
        monkeypatch.delenv("SMTP_PASS")

        with pytest.raises(ConfigurationError, match="SMTP_PASS"):
            load_environment_config()

    def test_no_credentials(self, mock_env_vars, monkeypatch):
        monkeypatch.delenv("SMTP_USER")
        monkeypatch.delenv("SMTP_PASS")

        assert not load_environment_config().has_smtp_credentials

    def test_invalid_redis_url(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "http://localhost:6379")

        with pytest.raises(ConfigurationError, match="REDIS_URL"):
            load_environment_config()


def test_configuration_error_formatting():
    error = ConfigurationError("Bad config", errors=["one"], suggestions=["fix it"])
    error.add_error("two")

    text = str(error)
    assert "Bad config" in text
    assert "1. one" in text
    assert "2. two" in text
    assert "- fix it" in text
