"""
Question frequency CRUD operations.

Dependencies: sqlalchemy, edu_assistant.boundary.db.models
System role: Question analytics persistence
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from edu_assistant.boundary.db.base import utc_now
from edu_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from edu_assistant.boundary.db.models.question_frequency_model import QuestionFrequencyModel

QUESTION_TEXT_LENGTH = 100


class QuestionFrequencyCRUD(BaseCRUD[QuestionFrequencyModel]):
    """CRUD operations for QuestionFrequencyModel."""

    def __init__(self) -> None:
        super().__init__(QuestionFrequencyModel)

    async def track(
        self,
        session: AsyncSession,
        student_id: UUID,
        question: str,
    ) -> QuestionFrequencyModel:
        """
        Count one more occurrence of a question for a student.

        Questions are compared on their first 100 characters.

        Args:
            session: Async database session
            student_id: Student UUID
            question: Sanitized question text

        Returns:
            The created or incremented row
        """
        question_text = question[:QUESTION_TEXT_LENGTH]
        row = await self.first(
            session,
            QuestionFrequencyModel.student_id == student_id,
            QuestionFrequencyModel.question_text == question_text,
        )

        if row is None:
            return await self.create(
                session,
                student_id=student_id,
                question_text=question_text,
                frequency_count=1,
            )

        row.frequency_count += 1
        row.last_asked = utc_now()
        await session.flush()
        return row


question_frequency_crud = QuestionFrequencyCRUD()
