"""User lifecycle event envelope and event-layer exceptions."""

import json
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

from notification_system.domain.models import OperationKind

USER_EVENTS_TOPIC = "user-events"


class EventError(Exception):
    """Base exception for event relay errors."""

    pass


class PublishError(EventError):
    """Raised by a broker when an event cannot be published."""

    pass


class UserEvent(BaseModel):
    """``{operation, email}`` pair published after a user write commits.

    Immutable; it has no identity beyond its two fields.
    """

    operation: OperationKind = Field(..., description="CREATE or DELETE")
    email: str = Field(..., description="Address of the affected user")

    model_config = {"frozen": True}

    @field_validator("operation", mode="before")
    @classmethod
    def parse_operation(cls, v: Any) -> OperationKind:
        """Accept operation names in any case."""
        return OperationKind.parse(v)

    @field_validator("email")
    @classmethod
    def require_email(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("email cannot be empty or whitespace-only")
        return stripped

    def to_payload(self) -> Dict[str, str]:
        """Wire form: ``{"operation": "CREATE", "email": "..."}``."""
        return {"operation": self.operation.value, "email": self.email}

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), ensure_ascii=False)
