"""Publisher side of the user event relay."""

from pydantic import ValidationError

from notification_system.domain.models import OperationKind
from notification_system.logging import get_logger

from .models import USER_EVENTS_TOPIC, UserEvent

logger = get_logger(__name__, component="relay")


class UserEventPublisher:
    """Publishes ``UserEvent`` envelopes after a user write has committed.

    Publishing never raises. A failure is logged and reported through the
    return value; the write that produced the event stays committed.
    """

    def __init__(self, broker, topic: str = USER_EVENTS_TOPIC):
        self.broker = broker
        self.topic = topic

    def publish(self, event: UserEvent) -> bool:
        """Send one event to the topic.

        Returns:
            True if the broker accepted the event
        """
        try:
            self.broker.publish(self.topic, event.to_payload())
        except Exception as e:
            logger.error(
                f"Failed to publish {event.operation.value} event for {event.email}: {e}",
                extra={
                    "event": "relay.publish.failed",
                    "topic": self.topic,
                    "operation": event.operation.value,
                    "error_type": type(e).__name__,
                },
            )
            return False

        logger.debug(
            f"Published {event.operation.value} event for {event.email}",
            extra={"event": "relay.publish.success", "topic": self.topic},
        )
        return True

    def publish_created(self, email: str) -> bool:
        return self._publish_for(OperationKind.CREATE, email)

    def publish_deleted(self, email: str) -> bool:
        return self._publish_for(OperationKind.DELETE, email)

    def _publish_for(self, operation: OperationKind, email) -> bool:
        try:
            event = UserEvent(operation=operation, email=email)
        except ValidationError as e:
            logger.error(
                f"Cannot build {operation.value} event for {email!r}: {e}",
                extra={
                    "event": "relay.publish.failed",
                    "topic": self.topic,
                    "operation": operation.value,
                    "error_type": type(e).__name__,
                },
            )
            return False
        return self.publish(event)
