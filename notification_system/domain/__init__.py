"""Domain models."""

from .models import OperationKind, User

__all__ = ["OperationKind", "User"]
