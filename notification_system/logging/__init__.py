"""Structured logging helpers shared by the user and notification services."""

import logging
from typing import Optional


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that tags every record with a component name.

    Fields passed through ``extra`` on the individual call win over the
    adapter's own fields.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str, component: Optional[str] = None):
    """Return a logger, wrapped so it stamps ``component`` when one is given.

    Args:
        name: Logger name (usually ``__name__``)
        component: Component label added to every record (e.g. "sender")

    Returns:
        Plain ``logging.Logger`` or a ``ComponentLoggerAdapter``

    Example:
        >>> logger = get_logger(__name__, component="consumer")
        >>> logger.info("Event received", extra={"event": "consumer.event.received"})
    """
    logger = logging.getLogger(name)

    if component:
        return ComponentLoggerAdapter(logger, {"component": component})

    return logger
