"""Request and response bodies of the HTTP API.

Request fields are optional at the schema level so that missing values reach
the handlers and get the service's own 400 messages instead of a generic
validation error.
"""

from typing import Optional

from pydantic import BaseModel, Field


class NotificationRequest(BaseModel):
    """Body of ``POST /api/notifications/send``."""

    email: Optional[str] = Field(None, description="Recipient address")
    operationType: Optional[str] = Field(None, description="CREATE or DELETE (any case)")


class UserCreateRequest(BaseModel):
    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Unique e-mail address")
    age: Optional[int] = Field(None, description="Age in years")


class UserUpdateRequest(BaseModel):
    """Body of ``PUT /api/users/{id}``; omitted or blank fields stay unchanged."""

    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None


class UserExistsResponse(BaseModel):
    exists: bool
