"""Result types and exceptions for the notification sender."""

from dataclasses import dataclass
from typing import Optional


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class InvalidArgumentError(NotificationError, ValueError):
    """Raised synchronously when the recipient or operation kind is unusable.

    This is the only notification error that reaches callers.
    """

    pass


class NotificationTemplateError(NotificationError):
    """Raised when a message template cannot be loaded or rendered."""

    pass


class MailTransportError(NotificationError):
    """Raised by the mail transport when a single delivery attempt fails.

    The sender treats it as transient and retries.
    """

    pass


@dataclass(frozen=True)
class DeliveryOutcome:
    """Terminal result of one bounded delivery sequence.

    Attributes:
        status: "sent" or "failed"
        attempts: Number of transport calls made
        error: Last transport error message when status is "failed"
        interrupted: True if shutdown cut the sequence short during a retry wait
    """

    status: str
    attempts: int
    error: Optional[str] = None
    interrupted: bool = False

    @classmethod
    def sent(cls, attempts: int) -> "DeliveryOutcome":
        return cls(status="sent", attempts=attempts)

    @classmethod
    def failed(
        cls, attempts: int, error: Optional[str], interrupted: bool = False
    ) -> "DeliveryOutcome":
        return cls(status="failed", attempts=attempts, error=error, interrupted=interrupted)

    def is_success(self) -> bool:
        return self.status == "sent"
