#!/usr/bin/env python3
"""Publish a single user event to the broker.

Useful for exercising a running consumer without going through the HTTP API.

Usage:
    python scripts/publish_test_event.py --email ivan@example.com
    python scripts/publish_test_event.py --email ivan@example.com --operation DELETE
    python scripts/publish_test_event.py --email ivan@example.com --redis-url redis://redis:6379/0
"""

import argparse
import os
import sys

from dotenv import load_dotenv

from notification_system.config.environment import DEFAULT_REDIS_URL
from notification_system.events import USER_EVENTS_TOPIC, RedisStreamsBroker, UserEventPublisher
from notification_system.events.models import UserEvent
from notification_system.logging.config import configure_logging


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Publish one user event")
    parser.add_argument("--email", required=True, help="Recipient address")
    parser.add_argument(
        "--operation", default="CREATE", help="CREATE or DELETE (default: CREATE)"
    )
    parser.add_argument("--topic", default=USER_EVENTS_TOPIC, help="Topic (stream) name")
    parser.add_argument(
        "--redis-url",
        default=os.getenv("REDIS_URL", DEFAULT_REDIS_URL),
        help="Redis URL (default: REDIS_URL or redis://localhost:6379/0)",
    )
    args = parser.parse_args()

    configure_logging(level="INFO", format_type="key-value", service="publish-test-event")

    try:
        event = UserEvent(operation=args.operation, email=args.email)
    except ValueError as e:
        print(f"✗ Invalid event: {e}", file=sys.stderr)
        return 2

    with RedisStreamsBroker(redis_url=args.redis_url) as broker:
        published = UserEventPublisher(broker, topic=args.topic).publish(event)

    if published:
        print(f"✓ Published {event.to_json()} to {args.topic}")
        return 0

    print(f"✗ Failed to publish to {args.topic}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
