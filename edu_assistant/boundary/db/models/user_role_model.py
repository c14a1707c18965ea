"""
User role ORM model.

Dependencies: sqlalchemy, edu_assistant.boundary.db.base
System role: Role lookup for the identity gate
"""

from enum import Enum
from uuid import UUID

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from edu_assistant.boundary.db.base import Base, TimestampMixin, UUIDMixin


class Role(str, Enum):
    ADMIN = "admin"
    STUDENT = "student"


class UserRoleModel(Base, UUIDMixin, TimestampMixin):
    """One role per identity-backend user."""

    __tablename__ = "user_roles"

    user_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False)
