"""
Chat message ORM model.

Append-only log of every user and assistant turn. Rows are never updated or
deleted by the service.

Dependencies: sqlalchemy, edu_assistant.boundary.db.base
System role: Durable chat log
"""

from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from edu_assistant.boundary.db.base import Base, CreatedAtMixin, UUIDMixin


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessageModel(Base, UUIDMixin, CreatedAtMixin):
    """
    One logged chat turn.

    Attributes:
        student_id: Student the exchange belongs to
        activity_id: Activity the exchange happened in (None for free chat)
        role: MessageRole value
        content: Sanitized user text or generated assistant text
        model_used: Generation model (assistant turns only)
        tokens_used: Total tokens reported by the provider (assistant turns only)
    """

    __tablename__ = "chat_messages"
    __table_args__ = (Index("ix_chat_messages_student_created", "student_id", "created_at"),)

    student_id: Mapped[UUID] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    activity_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("activities.id", ondelete="SET NULL"),
        nullable=True,
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    model_used: Mapped[str | None] = mapped_column(String(128), nullable=True)
    tokens_used: Mapped[int | None] = mapped_column(Integer, nullable=True)
