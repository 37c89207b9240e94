"""Account notification sender with bounded retries.

A notify call moves through ``START -> ATTEMPT(n) -> SUCCESS | RETRY(n+1) |
FAILURE``. Both terminal states are silent to the caller: the outcome is
turned into exactly one log record and nothing is raised. Only an unusable
recipient or operation kind raises, before any delivery attempt.
"""

import logging
import threading
from typing import Optional, Union

from notification_system.config.environment import DEFAULT_MAIL_FROM
from notification_system.domain.models import OperationKind
from notification_system.logging import get_logger
from notification_system.logging.context import log_context

from .models import DeliveryOutcome, InvalidArgumentError
from .smtp_client import build_message
from .templates import TemplateRenderer

logger = get_logger(__name__, component="sender")

MAX_RETRIES = 3
RETRY_DELAY_MS = 1000


class NotificationSender:
    """Sends the account created / account deleted mail to one address.

    The transport is any object with ``send(message)`` that raises on a
    failed attempt (normally ``SMTPClient``). Messages are rendered once at
    construction, so a notify call only validates, delivers and logs.
    """

    def __init__(
        self,
        transport,
        template_renderer: Optional[TemplateRenderer] = None,
        sender_address: str = DEFAULT_MAIL_FROM,
        max_retries: int = MAX_RETRIES,
        retry_delay_seconds: float = RETRY_DELAY_MS / 1000.0,
        shutdown_event: Optional[threading.Event] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize the sender.

        Args:
            transport: Mail transport with a ``send(EmailMessage)`` method
            template_renderer: Renderer for subjects and bodies (default renderer if None)
            sender_address: From address of every message
            max_retries: Total delivery attempts per notify call
            retry_delay_seconds: Pause between failed attempts
            shutdown_event: Process-wide shutdown flag; setting it aborts a pending retry wait
            logger_instance: Logger to use instead of the module logger
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if retry_delay_seconds < 0:
            raise ValueError("retry_delay_seconds cannot be negative")

        self.transport = transport
        self.template_renderer = template_renderer or TemplateRenderer()
        self.sender_address = sender_address
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.shutdown_event = shutdown_event or threading.Event()
        self.logger = logger_instance or logger

        self._messages = {
            operation: self.template_renderer.render(operation) for operation in OperationKind
        }

    def send_creation_notification(self, email: Optional[str]) -> None:
        """Tell ``email`` its account was created."""
        self.notify(email, OperationKind.CREATE)

    def send_deletion_notification(self, email: Optional[str]) -> None:
        """Tell ``email`` its account was deleted."""
        self.notify(email, OperationKind.DELETE)

    def notify(self, email: Optional[str], operation: Union[OperationKind, str]) -> None:
        """Deliver the message for ``operation`` to ``email``.

        Delivery failures are retried and finally logged, never raised.

        Raises:
            InvalidArgumentError: If email is None/blank or operation is not CREATE/DELETE
        """
        if not _is_valid_email(email):
            self.logger.error(
                f"Invalid email provided: {email!r}",
                extra={"event": "notification.invalid_argument", "reason": "blank_email"},
            )
            raise InvalidArgumentError("Email cannot be null or empty")

        try:
            operation = OperationKind.parse(operation)
        except ValueError:
            self.logger.error(
                f"Invalid operation provided: {operation!r}",
                extra={"event": "notification.invalid_argument", "reason": "unknown_operation"},
            )
            raise InvalidArgumentError(
                f"Unsupported operation {operation!r}. Supported values: CREATE, DELETE"
            ) from None

        recipient = email.strip()
        rendered = self._messages[operation]
        try:
            message = build_message(
                sender=self.sender_address,
                recipient=recipient,
                subject=rendered["subject"],
                text_body=rendered["text_body"],
            )
        except ValueError as e:
            # e.g. CR/LF inside the address
            self.logger.error(
                f"Invalid email provided: {email!r}",
                extra={"event": "notification.invalid_argument", "reason": "invalid_header"},
            )
            raise InvalidArgumentError(f"Email is not a valid header value: {e}") from None

        with log_context(operation=operation.value, recipient=recipient):
            outcome = self._deliver(message, recipient)
            self._report(outcome, recipient)

    def _deliver(self, message, recipient: str) -> DeliveryOutcome:
        """Run the bounded attempt loop and return its terminal outcome."""
        attempt = 0
        last_error = None

        while attempt < self.max_retries:
            try:
                self.transport.send(message)
                return DeliveryOutcome.sent(attempts=attempt + 1)
            except Exception as e:
                # Whatever the injected transport raises counts as one failed attempt
                last_error = str(e)
                attempt += 1
                retry_remaining = attempt < self.max_retries
                self.logger.warning(
                    f"Failed to send email to {recipient}. Attempt: {attempt}/{self.max_retries}",
                    extra={
                        "event": "notification.send.retry",
                        "attempt": attempt,
                        "error_type": type(e).__name__,
                        "retry_remaining": retry_remaining,
                    },
                )

                if retry_remaining and self._wait_before_retry():
                    return DeliveryOutcome.failed(
                        attempts=attempt, error=last_error, interrupted=True
                    )

        return DeliveryOutcome.failed(attempts=attempt, error=last_error)

    def _wait_before_retry(self) -> bool:
        """Pause between attempts.

        Returns:
            True if shutdown was signalled during (or before) the pause
        """
        return self.shutdown_event.wait(self.retry_delay_seconds)

    def _report(self, outcome: DeliveryOutcome, recipient: str) -> None:
        if outcome.is_success():
            self.logger.info(
                f"Email sent successfully to: {recipient}",
                extra={"event": "notification.send.success", "attempts": outcome.attempts},
            )
            return

        if outcome.interrupted:
            summary = (
                f"Failed to send email to: {recipient}, retry interrupted after "
                f"{outcome.attempts} attempt(s)"
            )
        else:
            summary = f"Failed to send email to: {recipient} after {outcome.attempts} attempts"

        self.logger.error(
            summary,
            extra={
                "event": "notification.send.failed",
                "attempts": outcome.attempts,
                "interrupted": outcome.interrupted,
                "error": outcome.error,
            },
        )


def _is_valid_email(email) -> bool:
    return isinstance(email, str) and bool(email.strip())
