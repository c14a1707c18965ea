"""
Activity CRUD operations.

Dependencies: sqlalchemy, edu_assistant.boundary.db.models
System role: Activity lookup for prompt assembly and admin statistics
"""

from sqlalchemy.ext.asyncio import AsyncSession

from edu_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from edu_assistant.boundary.db.models.activity_model import ActivityModel


class ActivityCRUD(BaseCRUD[ActivityModel]):
    """CRUD operations for ActivityModel."""

    def __init__(self) -> None:
        super().__init__(ActivityModel)

    async def count_active(self, session: AsyncSession) -> int:
        return await self.count(session, ActivityModel.is_active.is_(True))


activity_crud = ActivityCRUD()
