"""User accounts: CRUD plus CREATE/DELETE event publishing."""

from .exceptions import (
    DuplicateEmailError,
    UserNotFoundError,
    UserServiceError,
    UserValidationError,
)
from .service import UserService

__all__ = [
    "UserService",
    "UserServiceError",
    "UserValidationError",
    "UserNotFoundError",
    "DuplicateEmailError",
]
