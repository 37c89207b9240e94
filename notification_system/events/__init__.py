"""User event relay between the user service and the notification service.

- UserEvent: the ``{operation, email}`` envelope
- UserEventPublisher: best-effort publishing after a committed write
- NotificationConsumer: dispatches events into the notification sender
- RedisStreamsBroker / MemoryBroker: transports for the ``user-events`` topic
"""

from .broker import MemoryBroker, RedisStreamsBroker
from .consumer import DEFAULT_CONSUMER_GROUP, NotificationConsumer
from .models import USER_EVENTS_TOPIC, EventError, PublishError, UserEvent
from .relay import UserEventPublisher

__all__ = [
    # Envelope
    "UserEvent",
    "USER_EVENTS_TOPIC",
    "DEFAULT_CONSUMER_GROUP",
    # Exceptions
    "EventError",
    "PublishError",
    # Relay
    "UserEventPublisher",
    "NotificationConsumer",
    # Brokers
    "MemoryBroker",
    "RedisStreamsBroker",
]
