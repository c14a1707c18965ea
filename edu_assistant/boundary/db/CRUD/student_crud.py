"""
Student CRUD operations.

Dependencies: sqlalchemy, edu_assistant.boundary.db.models
System role: Student lookup and online-status tracking
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from edu_assistant.boundary.db.base import utc_now
from edu_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from edu_assistant.boundary.db.models.student_model import StudentModel, StudentSessionModel


class StudentCRUD(BaseCRUD[StudentModel]):
    """CRUD operations for StudentModel."""

    def __init__(self) -> None:
        super().__init__(StudentModel)

    async def get_by_user_id(self, session: AsyncSession, user_id: UUID) -> StudentModel | None:
        """
        Retrieve the student record linked to an identity-backend user.

        Args:
            session: Async database session
            user_id: Identity-backend user UUID

        Returns:
            StudentModel if linked, None otherwise
        """
        return await self.first(session, StudentModel.user_id == user_id)


class StudentSessionCRUD(BaseCRUD[StudentSessionModel]):
    """CRUD operations for StudentSessionModel."""

    def __init__(self) -> None:
        super().__init__(StudentSessionModel)

    async def touch(self, session: AsyncSession, student_id: UUID) -> StudentSessionModel:
        """
        Mark the student active now, creating the session row on first use.

        Args:
            session: Async database session
            student_id: Student UUID

        Returns:
            The created or refreshed StudentSessionModel
        """
        row = await self.first(session, StudentSessionModel.student_id == student_id)

        if row is None:
            return await self.create(session, student_id=student_id, is_active=True)

        row.last_activity = utc_now()
        row.is_active = True
        await session.flush()
        return row


student_crud = StudentCRUD()
student_session_crud = StudentSessionCRUD()
