"""
Student ORM models.

Students are linked to an identity-backend user and grouped into classes.
StudentSessionModel tracks when a student was last active.

Dependencies: sqlalchemy, edu_assistant.boundary.db.base
System role: Student persistence for authorization and prompt personalisation
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from edu_assistant.boundary.db.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin, utc_now


class StudentModel(Base, UUIDMixin, TimestampMixin):
    """
    Student record.

    Attributes:
        id: UUID primary key, referenced by chat messages as studentRef
        user_id: Identity-backend user owning this record (None for unlinked roster entries)
        name: Display name, used in the prompt template
        student_id: School-issued student number
        class_name: Class used to select class prompt settings
    """

    __tablename__ = "students"

    user_id: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    student_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    class_name: Mapped[str | None] = mapped_column(String(128), nullable=True)


class StudentSessionModel(Base, UUIDMixin, CreatedAtMixin):
    """Online-status row touched after each chat exchange."""

    __tablename__ = "student_sessions"

    student_id: Mapped[UUID] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    session_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    last_activity: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
