"""Configuration management for the user and notification services."""

from .environment import DEFAULT_MAIL_FROM, EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_file
from .models import (
    AppConfig,
    BrokerConfig,
    HttpConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MailConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "MailConfig",
    "BrokerConfig",
    "HttpConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Constants
    "DEFAULT_MAIL_FROM",
    # Exceptions
    "ConfigurationError",
]
