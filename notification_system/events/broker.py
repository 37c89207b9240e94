"""Message brokers carrying user events between the two services.

Both brokers share one synchronous interface:

- ``publish(topic, payload)``: append a JSON-serializable mapping to a topic
- ``poll(topic, group, handler)``: fetch one batch and hand each payload to
  ``handler``; returns the number of messages processed
- ``consume(topic, group, handler, shutdown_event)``: poll until shutdown

Handler errors are logged and the message is acknowledged anyway; there is no
redelivery and no dead-letter stream.
"""

import json
import os
import queue
import socket
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import redis
from redis.exceptions import RedisError, ResponseError

from notification_system.logging import get_logger

from .models import PublishError

logger = get_logger(__name__, component="broker")

Handler = Callable[[Any], None]


class MemoryBroker:
    """In-process broker for tests and single-process runs.

    Each topic is a thread-safe queue shared by all consumer groups, so one
    message reaches exactly one consumer.
    """

    def __init__(self, block_ms: int = 100):
        self.block_ms = block_ms
        self._queues: Dict[str, "queue.Queue[Dict[str, Any]]"] = defaultdict(queue.Queue)
        self._history: List[Tuple[str, Dict[str, Any]]] = []
        self._lock = threading.Lock()

    def publish(self, topic: str, payload: Mapping[str, Any]) -> None:
        message = dict(payload)
        with self._lock:
            self._history.append((topic, message))
            topic_queue = self._queues[topic]
        topic_queue.put(dict(message))

    def poll(self, topic: str, group: str, handler: Handler, timeout: Optional[float] = None) -> int:
        """Process every message already queued on ``topic``.

        Waits up to ``timeout`` seconds (default ``block_ms``) for the first one.
        """
        with self._lock:
            topic_queue = self._queues[topic]

        wait = self.block_ms / 1000.0 if timeout is None else timeout
        processed = 0
        while True:
            try:
                if processed == 0 and wait > 0:
                    message = topic_queue.get(timeout=wait)
                else:
                    message = topic_queue.get_nowait()
            except queue.Empty:
                return processed

            _dispatch(handler, message, topic, group)
            processed += 1

    def consume(
        self, topic: str, group: str, handler: Handler, shutdown_event: threading.Event
    ) -> None:
        while not shutdown_event.is_set():
            self.poll(topic, group, handler)

    def get_history(self, topic: Optional[str] = None) -> List[Tuple[str, Dict[str, Any]]]:
        """Everything published so far, optionally filtered by topic."""
        with self._lock:
            if topic is None:
                return list(self._history)
            return [(t, payload) for t, payload in self._history if t == topic]

    def close(self) -> None:
        pass


class RedisStreamsBroker:
    """Broker backed by Redis Streams with consumer groups.

    One stream per topic; each payload is stored as JSON in the ``data``
    field of the stream entry.
    """

    DATA_FIELD = "data"

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        max_stream_length: int = 10_000,
        block_ms: int = 1000,
        batch_size: int = 10,
        consumer_name: Optional[str] = None,
        client: Optional[redis.Redis] = None,
    ):
        """
        Args:
            redis_url: Redis connection URL
            max_stream_length: Approximate MAXLEN applied on every XADD
            block_ms: How long one XREADGROUP blocks
            batch_size: Entries fetched per XREADGROUP
            consumer_name: Name inside the consumer group (default: host-pid)
            client: Pre-built client, mainly for tests
        """
        self.redis_url = redis_url
        self.max_stream_length = max_stream_length
        self.block_ms = block_ms
        self.batch_size = batch_size
        self.consumer_name = consumer_name or f"{socket.gethostname()}-{os.getpid()}"
        self._client = client
        self._groups_ready: set = set()
        self._needs_replay: set = set()

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis.from_url(self.redis_url, decode_responses=True)
        return self._client

    def publish(self, topic: str, payload: Mapping[str, Any]) -> None:
        """Append ``payload`` to the ``topic`` stream.

        Raises:
            PublishError: If Redis rejects the write or is unreachable
        """
        try:
            body = json.dumps(dict(payload), ensure_ascii=False)
            self.client.xadd(
                topic,
                {self.DATA_FIELD: body},
                maxlen=self.max_stream_length,
                approximate=True,
            )
        except (RedisError, TypeError, ValueError) as e:
            raise PublishError(f"Failed to publish to {topic}: {e}") from e

    def ensure_group(self, topic: str, group: str) -> None:
        """Create the consumer group (and the stream) if it does not exist yet."""
        if (topic, group) in self._groups_ready:
            return
        try:
            self.client.xgroup_create(topic, group, id="0", mkstream=True)
        except ResponseError as e:
            if "BUSYGROUP" not in str(e):
                raise
        self._groups_ready.add((topic, group))

    def poll(self, topic: str, group: str, handler: Handler) -> int:
        """Read one batch for ``group`` and dispatch it.

        After a failed acknowledgement or a broken read, entries already
        delivered to this consumer are re-read from its pending list first,
        until that list is empty.

        Raises:
            RedisError: If the read itself fails
        """
        self.ensure_group(topic, group)

        key = (topic, group)
        if key in self._needs_replay:
            replayed = self._read_batch(topic, group, handler, stream_id="0", block=None)
            if replayed:
                return replayed
            self._needs_replay.discard(key)

        return self._read_batch(topic, group, handler, stream_id=">", block=self.block_ms)

    def _read_batch(
        self, topic: str, group: str, handler: Handler, stream_id: str, block: Optional[int]
    ) -> int:
        entries = self.client.xreadgroup(
            groupname=group,
            consumername=self.consumer_name,
            streams={topic: stream_id},
            count=self.batch_size,
            block=block,
        )

        processed = 0
        for _stream, messages in entries or []:
            for message_id, fields in messages:
                try:
                    # Pending entries trimmed from the stream come back without fields
                    if fields:
                        _dispatch(handler, fields.get(self.DATA_FIELD), topic, group)
                finally:
                    self._ack(topic, group, message_id)
                processed += 1

        return processed

    def _ack(self, topic: str, group: str, message_id: str) -> None:
        try:
            self.client.xack(topic, group, message_id)
        except RedisError as e:
            logger.error(
                f"Failed to acknowledge {message_id} on {topic}: {e}",
                extra={"event": "broker.ack.failed", "topic": topic, "group": group,
                       "error_type": type(e).__name__},
            )
            self._needs_replay.add((topic, group))

    def consume(
        self, topic: str, group: str, handler: Handler, shutdown_event: threading.Event
    ) -> None:
        """Poll until ``shutdown_event`` is set; Redis outages are logged and retried."""
        logger.info(
            f"Consuming {topic} as {group}/{self.consumer_name}",
            extra={"event": "broker.consume.started", "topic": topic, "group": group},
        )

        while not shutdown_event.is_set():
            try:
                self.poll(topic, group, handler)
            except RedisError as e:
                logger.error(
                    f"Broker read failed on {topic}: {e}",
                    extra={"event": "broker.consume.error", "topic": topic,
                           "error_type": type(e).__name__},
                )
                self._groups_ready.discard((topic, group))
                self._needs_replay.add((topic, group))
                shutdown_event.wait(1.0)

        logger.info(
            f"Stopped consuming {topic}",
            extra={"event": "broker.consume.stopped", "topic": topic, "group": group},
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def _dispatch(handler: Handler, payload: Any, topic: str, group: str) -> None:
    try:
        handler(payload)
    except Exception:
        logger.exception(
            f"Handler failed for message on {topic}",
            extra={"event": "broker.handler.error", "topic": topic, "group": group},
        )
