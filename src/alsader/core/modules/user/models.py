from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field

from alsader.core.db import MongoModel
from alsader.utils import now


class UserRole(StrEnum):
    ADMIN = "admin"
    USER = "user"


class User(MongoModel):
    """User domain model with credentials."""

    username: str
    full_name: str = ""
    role: UserRole = UserRole.USER
    password_hash: str  # bcrypt hash
    active: bool = True
    created_at: datetime = Field(default_factory=now)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    full_name: str = Field(..., description="Display name, usually in Arabic")
    role: UserRole = Field(..., description="Role: admin acts on all documents, user only on their own")
    active: bool = Field(..., description="Inactive users cannot log in")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, username=user.username, full_name=user.full_name, role=user.role, active=user.active)
