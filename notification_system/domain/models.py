"""Core domain models shared by the user and notification services.

- OperationKind: the user lifecycle operation that triggers a notification
- User: a stored user account as seen by the service layer
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator


class OperationKind(str, Enum):
    """User lifecycle operation carried by events and notification requests."""

    CREATE = "CREATE"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: Union["OperationKind", str]) -> "OperationKind":
        """Resolve an operation from its name, ignoring case and surrounding whitespace.

        Raises:
            ValueError: If the value names neither CREATE nor DELETE
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(f"Unknown operation: {value!r}")


class User(BaseModel):
    """A user account.

    ``id`` is assigned by the store on insert; ``email`` is unique across all
    users.
    """

    id: int = Field(..., gt=0, description="Surrogate key generated on insert")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Unique e-mail address")
    age: Optional[int] = Field(None, ge=0, description="Age in years")
    created_at: datetime = Field(..., description="When the account was created (UTC)")

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    model_config = {"json_schema_extra": {"example": {
        "id": 1,
        "name": "Ivan Petrov",
        "email": "ivan@example.com",
        "age": 30,
        "created_at": "2025-11-01T12:00:00Z",
    }}}
