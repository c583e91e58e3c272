"""User document model for API callers."""

from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import Field


class UserRole(str, Enum):
    """Role of an application user."""

    SUPER_ADMIN = "super_admin"
    CELL_LEADER = "cell_leader"


class User(Document):
    """An application user.

    Users upload and review member lists; only super admins may commit
    them to the directory. Credentials are managed outside this service,
    callers authenticate with a bearer token whose subject is the email.
    """

    email: Indexed(str, unique=True)
    name: str
    phone: Optional[str] = None
    role: UserRole = UserRole.CELL_LEADER
    is_active: bool = True

    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role.value}, is_active={self.is_active})>"
