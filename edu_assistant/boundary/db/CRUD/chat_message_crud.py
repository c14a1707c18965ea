"""
Chat message CRUD operations.

Append-only access to the chat log: rows are created and read, never
updated or deleted.

Dependencies: sqlalchemy, edu_assistant.boundary.db.models
System role: Chat log persistence
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edu_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from edu_assistant.boundary.db.models.chat_message_model import ChatMessageModel


class ChatMessageCRUD(BaseCRUD[ChatMessageModel]):
    """CRUD operations for ChatMessageModel."""

    def __init__(self) -> None:
        super().__init__(ChatMessageModel)

    async def get_recent(
        self,
        session: AsyncSession,
        student_id: UUID,
        limit: int,
        activity_id: UUID | None = None,
    ) -> Sequence[ChatMessageModel]:
        """
        Retrieve the most recent turns of a student, oldest first.

        Args:
            session: Async database session
            student_id: Student UUID
            limit: Maximum number of turns
            activity_id: Restrict to one activity when given

        Returns:
            Up to `limit` messages in chronological order
        """
        if limit <= 0:
            return []

        stmt = select(ChatMessageModel).where(ChatMessageModel.student_id == student_id)
        if activity_id is not None:
            stmt = stmt.where(ChatMessageModel.activity_id == activity_id)
        stmt = stmt.order_by(ChatMessageModel.created_at.desc()).limit(limit)

        result = await session.execute(stmt)
        return list(reversed(result.scalars().all()))

    async def count_since(self, session: AsyncSession, since: datetime) -> int:
        return await self.count(session, ChatMessageModel.created_at >= since)


chat_message_crud = ChatMessageCRUD()
