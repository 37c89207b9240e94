"""Account notification delivery.

- NotificationSender: bounded-retry delivery of the account created / deleted mail
- SMTPClient: smtplib-backed mail transport
- TemplateRenderer: Jinja2 templates keyed by operation kind
- DeliveryOutcome and the notification exceptions
"""

from .models import (
    DeliveryOutcome,
    InvalidArgumentError,
    MailTransportError,
    NotificationError,
    NotificationTemplateError,
)
from .sender import MAX_RETRIES, RETRY_DELAY_MS, NotificationSender
from .smtp_client import SMTPClient, build_message
from .templates import TemplateRenderer

__all__ = [
    # Main service
    "NotificationSender",
    "MAX_RETRIES",
    "RETRY_DELAY_MS",
    # Results
    "DeliveryOutcome",
    # Exceptions
    "NotificationError",
    "InvalidArgumentError",
    "MailTransportError",
    "NotificationTemplateError",
    # Components
    "SMTPClient",
    "TemplateRenderer",
    "build_message",
]
