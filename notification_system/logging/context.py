"""Scoped logging context.

Fields pushed here are merged into every log record emitted inside the scope
by ``ContextualFilter``. The store is a ``ContextVar``, so each consumer thread
and each request handled by the API sees only its own fields.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

_log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current scope."""
    return _log_context.get().copy()


def push_log_context(**fields) -> Token:
    """Merge ``fields`` into the active context.

    Returns:
        Token for ``pop_log_context`` to restore the previous state
    """
    return _log_context.set({**_log_context.get(), **fields})


def pop_log_context(token: Token) -> None:
    """Restore the context saved by ``push_log_context``."""
    _log_context.reset(token)


def clear_log_context() -> None:
    """Drop every context field (used by tests)."""
    _log_context.set({})


class log_context:
    """Context manager adding fields to all logs emitted inside the block.

    Example:
        >>> with log_context(operation="CREATE", recipient="a@b.c"):
        ...     logger.info("Sending notification")
    """

    def __init__(self, **fields):
        self.fields = fields
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
            self.token = None
        return False
