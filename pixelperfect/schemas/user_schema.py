"""User identity held by the session."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    ADMIN = "admin"
    CLIENT = "client"


class User(BaseModel):
    """Signed-in user record, persisted as a flat field-value object."""

    id: str
    email: str
    name: str
    role: Role = Role.CLIENT
    is_email_verified: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
