"""Configuration schema models using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class MailConfig(BaseModel):
    """Mail delivery settings for the notification sender."""

    use_tls: bool = Field(True, description="Use STARTTLS (or implicit TLS on port 465)")
    max_retries: int = Field(
        3, ge=1, le=10, description="Total delivery attempts per notification"
    )
    retry_delay_ms: int = Field(
        1000, ge=0, le=60000, description="Fixed pause between failed attempts (milliseconds)"
    )
    timeout_seconds: float = Field(
        10.0, gt=0, le=120, description="Socket timeout for the SMTP connection"
    )


class BrokerConfig(BaseModel):
    """Message broker settings for user lifecycle events."""

    topic: str = Field("user-events", min_length=1, description="Stream carrying user events")
    consumer_group: str = Field(
        "notification-service", min_length=1, description="Consumer group of the notifier"
    )
    block_ms: int = Field(
        1000, ge=10, le=30000, description="How long one read blocks waiting for events"
    )
    batch_size: int = Field(10, ge=1, le=1000, description="Events fetched per read")
    max_stream_length: int = Field(
        10_000, ge=100, description="Approximate cap on the stream length"
    )

    @field_validator("topic", "consumer_group")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip whitespace from names."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped


class HttpConfig(BaseModel):
    """HTTP listener settings for the API role."""

    host: str = Field("0.0.0.0", min_length=1, description="Bind address")
    port: int = Field(8080, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object. Every section has working defaults."""

    mail: MailConfig = Field(default_factory=MailConfig, description="Mail delivery settings")
    broker: BrokerConfig = Field(default_factory=BrokerConfig, description="Broker settings")
    http: HttpConfig = Field(default_factory=HttpConfig, description="HTTP listener settings")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @property
    def retry_delay_seconds(self) -> float:
        return self.mail.retry_delay_ms / 1000.0
