"""HTTP surface: user CRUD and the manual notification trigger."""

from .app import NotificationHandlers, UserHandlers, create_app

__all__ = ["create_app", "NotificationHandlers", "UserHandlers"]
