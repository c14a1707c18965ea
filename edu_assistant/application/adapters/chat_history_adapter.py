"""
Chat history adapter.

Persistence logger for the chat pipeline. Every append runs in its own
session and transaction, so a user turn and its assistant turn are two
independent writes (not atomic as a pair).

Dependencies: edu_assistant.boundary.db.CRUD.chat_message_crud
System role: Chat history business logic adapter
"""

import logging
from typing import List
from uuid import UUID

from langchain_core.messages import BaseMessage
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from edu_assistant.boundary.db.CRUD.chat_message_crud import chat_message_crud
from edu_assistant.boundary.db.models.chat_message_model import MessageRole
from edu_assistant.core.exceptions import PersistenceError
from edu_assistant.core.prompt import history_to_messages
from edu_assistant.models.chat import ChatMessage

logger = logging.getLogger(__name__)


class ChatHistoryAdapter:
    """
    High-level adapter for chat history operations.

    Scoped to one student (and optionally one activity). Append-only: there
    is no update or delete path.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        student_id: UUID,
        activity_id: UUID | None = None,
    ) -> None:
        """
        Initialize chat history adapter.

        Args:
            session_factory: Factory for database sessions
            student_id: Student whose history this adapter reads and writes
            activity_id: Activity scope for new messages
        """
        self._session_factory = session_factory
        self.student_id = student_id
        self.activity_id = activity_id

    async def append(self, message: ChatMessage) -> None:
        """
        Write one turn to the log.

        Raises:
            PersistenceError: The write failed (transaction rolled back)
        """
        async with self._session_factory() as db:
            try:
                await chat_message_crud.create(
                    db,
                    student_id=message.student_id,
                    activity_id=message.activity_id,
                    role=message.role,
                    content=message.content,
                    model_used=message.model_used,
                    tokens_used=message.tokens_used,
                )
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(
                    f"{__name__}:append - Failed to store {message.role} message: {type(e).__name__}",
                    extra={"student_id": str(message.student_id)},
                )
                raise PersistenceError(
                    "Failed to store chat message",
                    details={"role": message.role},
                ) from e

    async def add_user_message(self, content: str) -> None:
        await self.append(
            ChatMessage(
                student_id=self.student_id,
                activity_id=self.activity_id,
                role=MessageRole.USER.value,
                content=content,
            )
        )

    async def add_ai_message(
        self,
        content: str,
        model_used: str | None = None,
        tokens_used: int | None = None,
    ) -> None:
        await self.append(
            ChatMessage(
                student_id=self.student_id,
                activity_id=self.activity_id,
                role=MessageRole.ASSISTANT.value,
                content=content,
                model_used=model_used,
                tokens_used=tokens_used,
            )
        )

    async def get_recent_messages(self, limit: int) -> List[BaseMessage]:
        """
        Get the most recent turns of the student, oldest first.

        History spans all activities of the student.

        Args:
            limit: Maximum number of turns

        Returns:
            List of HumanMessage / AIMessage
        """
        async with self._session_factory() as db:
            rows = await chat_message_crud.get_recent(db, self.student_id, limit)
        return history_to_messages((row.role, row.content) for row in rows)
