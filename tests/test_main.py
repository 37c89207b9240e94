"""Unit tests for the main entry point.

Tests the main() function including:
- CLI argument parsing
- Log level priority (CLI > env > config)
- Role dispatch
- Exit code handling
"""

import signal
import threading
from unittest.mock import MagicMock, patch

import pytest
import uvicorn

from notification_system.config.environment import EnvironmentConfig
from notification_system.config.exceptions import ConfigurationError
from notification_system.config.models import AppConfig, LoggingConfig
from notification_system.main import (
    ShutdownAwareServer,
    build_sender,
    load_runtime_config,
    main,
    run_api,
    run_consumer,
)


def make_env_config(log_level=None):
    return EnvironmentConfig(smtp_host="smtp.example.com", smtp_port=587, log_level=log_level)


class TestLoadRuntimeConfig:
    """Test suite for load_runtime_config helper."""

    @pytest.mark.parametrize(
        "cli,env,config,expected",
        [
            ("ERROR", "DEBUG", "WARNING", "ERROR"),
            (None, "DEBUG", "WARNING", "DEBUG"),
            (None, None, "WARNING", "WARNING"),
        ],
    )
    def test_log_level_priority(self, cli, env, config, expected):
        app_config = AppConfig(logging=LoggingConfig(level=config))

        with patch("notification_system.main.load_config") as mock_load:
            mock_load.return_value = (app_config, make_env_config(env))

            _, env_config = load_runtime_config(None, cli)

        assert env_config.log_level == expected

    def test_default_log_level(self):
        with patch("notification_system.main.load_config") as mock_load:
            mock_load.return_value = (AppConfig(), make_env_config())

            _, env_config = load_runtime_config(None, None)

        assert env_config.log_level == "INFO"


def test_build_sender_uses_config():
    app_config = AppConfig.model_validate({"mail": {"max_retries": 5, "retry_delay_ms": 250}})
    env_config = EnvironmentConfig(
        smtp_host="smtp.example.com", smtp_port=587, mail_from="noreply@yandex.ru"
    )
    shutdown_event = threading.Event()

    sender = build_sender(app_config, env_config, shutdown_event)

    assert sender.max_retries == 5
    assert sender.retry_delay_seconds == 0.25
    assert sender.sender_address == "noreply@yandex.ru"
    assert sender.shutdown_event is shutdown_event
    assert sender.transport.env_config is env_config


def test_run_consumer_wires_broker_and_stops(monkeypatch):
    broker = MagicMock()
    monkeypatch.setattr("notification_system.main.build_broker", lambda a, e: broker)
    monkeypatch.setattr("notification_system.main.signal.signal", MagicMock())

    exit_code = run_consumer(AppConfig(), make_env_config(), threading.Event())

    assert exit_code == 0
    args = broker.consume.call_args.args
    assert args[0] == "user-events"
    assert args[1] == "notification-service"
    broker.close.assert_called_once()


class TestMain:
    """Test suite for main()."""

    @pytest.fixture(autouse=True)
    def no_logging_setup(self):
        with patch("notification_system.main.configure_logging") as mock_configure:
            yield mock_configure

    @pytest.fixture
    def runtime_config(self):
        with patch("notification_system.main.load_runtime_config") as mock_load:
            mock_load.return_value = (AppConfig(), make_env_config("INFO"))
            yield mock_load

    def test_role_is_required(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2

    def test_api_role(self, runtime_config, no_logging_setup):
        with patch("notification_system.main.run_api", return_value=0) as mock_run_api:
            assert main(["--role", "api"]) == 0

        mock_run_api.assert_called_once()
        no_logging_setup.assert_called_once()
        assert no_logging_setup.call_args.kwargs["service"] == "notification-system-api"

    def test_consumer_role_with_options(self, runtime_config, tmp_path):
        config_file = tmp_path / "config.yaml"

        with patch("notification_system.main.run_consumer", return_value=0) as mock_run:
            assert main(["--role", "consumer", "--config", str(config_file), "--log-level", "DEBUG"]) == 0

        mock_run.assert_called_once()
        runtime_config.assert_called_once_with(config_file, "DEBUG")

    def test_configuration_error_exits_1(self, capsys):
        with patch(
            "notification_system.main.load_runtime_config",
            side_effect=ConfigurationError("Missing required environment variable: SMTP_HOST"),
        ):
            assert main(["--role", "consumer"]) == 1

        assert "Configuration Error" in capsys.readouterr().err

    def test_unexpected_error_exits_1(self, runtime_config, capsys):
        with patch("notification_system.main.run_api", side_effect=RuntimeError("port in use")):
            assert main(["--role", "api"]) == 1

        assert "Fatal error: port in use" in capsys.readouterr().err

    def test_keyboard_interrupt_exits_0(self, runtime_config):
        with patch("notification_system.main.run_consumer", side_effect=KeyboardInterrupt):
            assert main(["--role", "consumer"]) == 0


def test_server_signal_sets_shutdown_event():
    """Test that SIGTERM reaches the sender's shutdown event before requests drain."""
    shutdown_event = threading.Event()
    server = ShutdownAwareServer(uvicorn.Config(app=MagicMock(), log_config=None), shutdown_event)

    server.handle_exit(signal.SIGTERM, None)

    assert shutdown_event.is_set()
    assert server.should_exit


def test_run_api_serves_with_shutdown_aware_server(monkeypatch):
    database = MagicMock()
    database.open.return_value = database
    broker = MagicMock()
    monkeypatch.setattr("notification_system.main.Database", lambda url: database)
    monkeypatch.setattr("notification_system.main.build_broker", lambda a, e: broker)
    served = {}

    def fake_run(self):
        served["event"] = self.shutdown_event
        served["port"] = self.config.port

    monkeypatch.setattr(ShutdownAwareServer, "run", fake_run)
    shutdown_event = threading.Event()

    assert run_api(AppConfig(), make_env_config(), shutdown_event) == 0

    assert served == {"event": shutdown_event, "port": 8080}
    assert shutdown_event.is_set()
    broker.close.assert_called_once()
    database.close.assert_called_once()
