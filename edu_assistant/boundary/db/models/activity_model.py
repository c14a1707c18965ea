"""
Activity ORM model.

Dependencies: sqlalchemy, edu_assistant.boundary.db.base
System role: Learning activity persistence
"""

from enum import Enum

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from edu_assistant.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ActivityType(str, Enum):
    """Kinds of learning activity; also keys class prompt settings."""

    ARGUMENTATION = "argumentation"
    DISCUSSION = "discussion"
    EXPERIMENT = "experiment"


class ActivityModel(Base, UUIDMixin, TimestampMixin):
    """
    Learning activity a student can chat about.

    Attributes:
        title: Shown to the model as {activity_title}
        type: ActivityType value stored as text
        is_active: Inactive activities still resolve for chat but are hidden from students
    """

    __tablename__ = "activities"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
