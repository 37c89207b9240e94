"""Environment variable loading and validation."""

import os
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from .exceptions import ConfigurationError

DEFAULT_MAIL_FROM = "raushangalin@yandex.ru"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_DATABASE_URL = "sqlite:///./data/users.db"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EnvironmentConfig:
    """Deployment settings read from the process environment."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        smtp_user: Optional[str] = None,
        smtp_pass: Optional[str] = None,
        mail_from: Optional[str] = None,
        redis_url: Optional[str] = None,
        database_url: Optional[str] = None,
        log_level: Optional[str] = None,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.mail_from = mail_from or DEFAULT_MAIL_FROM
        self.redis_url = redis_url or DEFAULT_REDIS_URL
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.log_level = log_level

    @property
    def has_smtp_credentials(self) -> bool:
        return bool(self.smtp_user and self.smtp_pass)


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Required:
    - SMTP_HOST: SMTP server hostname
    - SMTP_PORT: SMTP server port (1-65535)

    Optional:
    - SMTP_USER / SMTP_PASS: SMTP credentials (both or neither)
    - MAIL_FROM: sender address (default: raushangalin@yandex.ru)
    - REDIS_URL: broker URL (default: redis://localhost:6379/0)
    - DATABASE_URL: user store URL (default: sqlite:///./data/users.db)
    - LOG_LEVEL: overrides the configured log level

    Returns:
        EnvironmentConfig with validated values

    Raises:
        ConfigurationError: If required variables are missing or invalid
    """
    errors = []

    smtp_host = os.getenv("SMTP_HOST")
    smtp_port_str = os.getenv("SMTP_PORT")
    smtp_user = os.getenv("SMTP_USER")
    smtp_pass = os.getenv("SMTP_PASS")
    mail_from = os.getenv("MAIL_FROM")
    redis_url = os.getenv("REDIS_URL")
    database_url = os.getenv("DATABASE_URL")
    log_level = os.getenv("LOG_LEVEL")

    if not smtp_host:
        errors.append("Missing required environment variable: SMTP_HOST")

    if not smtp_port_str:
        errors.append("Missing required environment variable: SMTP_PORT")

    smtp_port = None
    if smtp_port_str:
        try:
            smtp_port = int(smtp_port_str)
            if smtp_port < 1 or smtp_port > 65535:
                errors.append(
                    f"Invalid SMTP_PORT: {smtp_port}. Must be between 1 and 65535."
                )
        except ValueError:
            errors.append(
                f"Invalid SMTP_PORT: '{smtp_port_str}'. Must be a valid integer."
            )

    if mail_from:
        try:
            mail_from = validate_email(mail_from, check_deliverability=False).normalized
        except EmailNotValidError as e:
            errors.append(f"Invalid MAIL_FROM address '{mail_from}': {e}")

    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if smtp_user and not smtp_pass:
        errors.append(
            "SMTP_USER is set but SMTP_PASS is not. Both must be set for authentication."
        )
    elif smtp_pass and not smtp_user:
        errors.append(
            "SMTP_PASS is set but SMTP_USER is not. Both must be set for authentication."
        )

    if redis_url and not redis_url.startswith(("redis://", "rediss://", "unix://")):
        errors.append(
            f"Invalid REDIS_URL: '{redis_url}'. Expected a redis://, rediss:// or unix:// URL."
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your credentials",
                "Ensure SMTP_HOST and SMTP_PORT are set",
                "Verify SMTP_PORT is a number between 1 and 65535",
            ],
        )

    return EnvironmentConfig(
        smtp_host=smtp_host,
        smtp_port=smtp_port,
        smtp_user=smtp_user,
        smtp_pass=smtp_pass,
        mail_from=mail_from,
        redis_url=redis_url,
        database_url=database_url,
        log_level=log_level.upper() if log_level else None,
    )
