"""Consumer side of the user event relay.

Turns each payload read from the ``user-events`` topic into one call on the
notification sender. A bad event is logged once and dropped; nothing raised
while handling one event stops the consumer.
"""

import json
import logging
import threading
from typing import Any, Mapping, Optional

from notification_system.domain.models import OperationKind
from notification_system.logging import get_logger
from notification_system.notifications.models import InvalidArgumentError

from .models import USER_EVENTS_TOPIC

logger = get_logger(__name__, component="consumer")

DEFAULT_CONSUMER_GROUP = "notification-service"


class NotificationConsumer:
    """Dispatches user events into ``NotificationSender`` entry points."""

    def __init__(self, sender, logger_instance: Optional[logging.Logger] = None):
        self.sender = sender
        self.logger = logger_instance or logger
        self._dispatch = {
            OperationKind.CREATE: sender.send_creation_notification,
            OperationKind.DELETE: sender.send_deletion_notification,
        }

    def handle(self, payload: Any) -> None:
        """Handle one raw payload (mapping, JSON text or bytes)."""
        event = self._decode(payload)
        if event is None:
            return

        self.logger.debug(
            f"Received event: {event}",
            extra={"event": "consumer.event.received"},
        )

        raw_operation = event.get("operation")
        email = event.get("email")
        if raw_operation is None or email is None:
            self.logger.error(
                f"Event missing operation or email, dropping: {event}",
                extra={"event": "consumer.event.dropped", "reason": "missing_field"},
            )
            return

        try:
            operation = OperationKind.parse(raw_operation)
        except ValueError:
            self.logger.warning(
                f"Unknown operation: {raw_operation}",
                extra={"event": "consumer.event.unknown_operation", "operation": str(raw_operation)},
            )
            return

        try:
            self._dispatch[operation](email)
        except InvalidArgumentError as e:
            self.logger.error(
                f"Invalid event for {operation.value}: {e}",
                extra={"event": "consumer.event.invalid", "operation": operation.value},
            )
        except Exception as e:
            self.logger.exception(
                f"Failed to process {operation.value} event: {e}",
                extra={"event": "consumer.event.error", "operation": operation.value},
            )

    def run(
        self,
        broker,
        shutdown_event: threading.Event,
        topic: str = USER_EVENTS_TOPIC,
        group: str = DEFAULT_CONSUMER_GROUP,
    ) -> None:
        """Consume ``topic`` until ``shutdown_event`` is set."""
        self.logger.info(
            f"Notification consumer started on {topic}",
            extra={"event": "consumer.started", "topic": topic, "group": group},
        )
        broker.consume(topic, group, self.handle, shutdown_event)
        self.logger.info(
            "Notification consumer stopped",
            extra={"event": "consumer.stopped", "topic": topic},
        )

    def _decode(self, payload: Any) -> Optional[Mapping[str, Any]]:
        if isinstance(payload, Mapping):
            return payload

        if isinstance(payload, bytes):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError:
                payload = None

        if isinstance(payload, str):
            try:
                decoded = json.loads(payload)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, Mapping):
                return decoded

        self.logger.error(
            f"Undecodable event payload, dropping: {payload!r}",
            extra={"event": "consumer.event.dropped", "reason": "undecodable"},
        )
        return None
