"""Main entry point for the user and notification services."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import os
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Optional, Tuple

import uvicorn

from notification_system.api import create_app
from notification_system.config.environment import EnvironmentConfig
from notification_system.config.exceptions import ConfigurationError
from notification_system.config.loader import load_config
from notification_system.config.models import AppConfig
from notification_system.events import NotificationConsumer, RedisStreamsBroker, UserEventPublisher
from notification_system.logging import get_logger
from notification_system.logging.config import configure_logging
from notification_system.notifications import NotificationSender, SMTPClient
from notification_system.persistence import Database
from notification_system.users import UserService

logger = get_logger(__name__, component="cli")

ROLES = ("api", "consumer")


class ShutdownAwareServer(uvicorn.Server):
    """uvicorn server that sets the process shutdown event on SIGINT/SIGTERM.

    The event is set when the signal arrives, before uvicorn drains in-flight
    requests, so a pending retry wait ends at once.
    """

    def __init__(self, config: uvicorn.Config, shutdown_event: threading.Event):
        super().__init__(config)
        self.shutdown_event = shutdown_event

    def handle_exit(self, sig, frame) -> None:
        self.shutdown_event.set()
        super().handle_exit(sig, frame)


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > environment > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def build_sender(
    app_config: AppConfig, env_config: EnvironmentConfig, shutdown_event: threading.Event
) -> NotificationSender:
    transport = SMTPClient(
        env_config,
        use_tls=app_config.mail.use_tls,
        timeout=app_config.mail.timeout_seconds,
    )
    return NotificationSender(
        transport,
        sender_address=env_config.mail_from,
        max_retries=app_config.mail.max_retries,
        retry_delay_seconds=app_config.retry_delay_seconds,
        shutdown_event=shutdown_event,
    )


def build_broker(app_config: AppConfig, env_config: EnvironmentConfig) -> RedisStreamsBroker:
    return RedisStreamsBroker(
        redis_url=env_config.redis_url,
        max_stream_length=app_config.broker.max_stream_length,
        block_ms=app_config.broker.block_ms,
        batch_size=app_config.broker.batch_size,
    )


def run_api(
    app_config: AppConfig, env_config: EnvironmentConfig, shutdown_event: threading.Event
) -> int:
    """Serve the HTTP API until uvicorn exits."""
    database = Database(env_config.database_url).open()
    broker = build_broker(app_config, env_config)
    try:
        publisher = UserEventPublisher(broker, topic=app_config.broker.topic)
        user_service = UserService(database, publisher)
        sender = build_sender(app_config, env_config, shutdown_event)
        app = create_app(user_service, sender)

        logger.info(
            f"Serving HTTP API on {app_config.http.host}:{app_config.http.port}",
            extra={"event": "service.api.started", "port": app_config.http.port},
        )
        config = uvicorn.Config(
            app, host=app_config.http.host, port=app_config.http.port, log_config=None
        )
        ShutdownAwareServer(config, shutdown_event).run()
    finally:
        shutdown_event.set()
        broker.close()
        database.close()

    return 0


def run_consumer(
    app_config: AppConfig, env_config: EnvironmentConfig, shutdown_event: threading.Event
) -> int:
    """Consume user events until SIGINT/SIGTERM."""
    broker = build_broker(app_config, env_config)
    sender = build_sender(app_config, env_config, shutdown_event)
    consumer = NotificationConsumer(sender)

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        consumer.run(
            broker,
            shutdown_event,
            topic=app_config.broker.topic,
            group=app_config.broker.consumer_group,
        )
    finally:
        broker.close()

    return 0


def main(argv=None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    parser = argparse.ArgumentParser(
        description="Notification System - user service and account notification consumer"
    )
    parser.add_argument(
        "--role",
        required=True,
        choices=ROLES,
        help="api: serve the HTTP API; consumer: deliver notifications for user events",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    args = parser.parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        environment = os.environ.get("ENVIRONMENT", "local")
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=environment,
            service=f"notification-system-{args.role}",
        )

        logger.info(
            "Notification System starting",
            extra={
                "event": "service.starting",
                "role": args.role,
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
            },
        )

        shutdown_event = threading.Event()
        if args.role == "api":
            exit_code = run_api(app_config, env_config, shutdown_event)
        else:
            exit_code = run_consumer(app_config, env_config, shutdown_event)

        logger.info(
            "Notification System stopped",
            extra={
                "event": "service.stopping",
                "role": args.role,
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
