"""Shared fixtures."""

import logging
import threading
from unittest.mock import Mock

import pytest

from notification_system.config.environment import EnvironmentConfig
from notification_system.events import MemoryBroker, UserEventPublisher
from notification_system.notifications import NotificationSender
from notification_system.persistence import Database
from notification_system.users import UserService


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock required environment variables for testing."""
    monkeypatch.setenv("SMTP_HOST", "smtp.test.com")
    monkeypatch.setenv("SMTP_PORT", "587")
    monkeypatch.setenv("SMTP_USER", "user@test.com")
    monkeypatch.setenv("SMTP_PASS", "testpass123")
    for name in ("MAIL_FROM", "REDIS_URL", "DATABASE_URL", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def env_config():
    """Environment configuration for testing."""
    return EnvironmentConfig(
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="user@example.com",
        smtp_pass="secret123",
    )


@pytest.fixture
def transport():
    """Mail transport that succeeds unless told otherwise."""
    mock_transport = Mock()
    mock_transport.send.return_value = None
    return mock_transport


@pytest.fixture
def sender(transport):
    """Sender with no pause between attempts."""
    return NotificationSender(transport, retry_delay_seconds=0, shutdown_event=threading.Event())


@pytest.fixture
def database():
    """Open in-memory user store."""
    db = Database("sqlite:///:memory:").open()
    yield db
    db.close()


@pytest.fixture
def broker():
    return MemoryBroker(block_ms=10)


@pytest.fixture
def user_service(database, broker):
    return UserService(database, UserEventPublisher(broker))


@pytest.fixture
def capture_logs(caplog):
    """caplog at DEBUG, plus a helper returning records for one event name."""
    caplog.set_level(logging.DEBUG)

    def records_for(event_name):
        return [r for r in caplog.records if getattr(r, "event", None) == event_name]

    return records_for
