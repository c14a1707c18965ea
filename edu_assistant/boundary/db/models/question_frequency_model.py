"""
Question frequency ORM model.

Dependencies: sqlalchemy, edu_assistant.boundary.db.base
System role: Per-student question analytics
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from edu_assistant.boundary.db.base import Base, TimestampMixin, UUIDMixin, utc_now


class QuestionFrequencyModel(Base, UUIDMixin, TimestampMixin):
    """How often a student asked the same (truncated) question."""

    __tablename__ = "question_frequency"

    student_id: Mapped[UUID] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    question_text: Mapped[str] = mapped_column(String(100), nullable=False)
    frequency_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    last_asked: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
