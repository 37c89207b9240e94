"""User service exceptions."""


class UserServiceError(Exception):
    """Base exception for user service errors."""

    pass


class UserValidationError(UserServiceError, ValueError):
    """Raised when a request carries missing or invalid user data."""

    pass


class UserNotFoundError(UserServiceError):
    """Raised when no user matches the requested id or email."""

    pass


class DuplicateEmailError(UserServiceError):
    """Raised when an email is already owned by another user."""

    pass
