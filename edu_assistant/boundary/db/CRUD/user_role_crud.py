"""
User role CRUD operations.

Dependencies: sqlalchemy, edu_assistant.boundary.db.models
System role: Role lookup for the identity gate
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edu_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from edu_assistant.boundary.db.models.user_role_model import UserRoleModel


class UserRoleCRUD(BaseCRUD[UserRoleModel]):
    """CRUD operations for UserRoleModel."""

    def __init__(self) -> None:
        super().__init__(UserRoleModel)

    async def get_role(self, session: AsyncSession, user_id: UUID) -> str | None:
        """
        Look up the role assigned to a user.

        Args:
            session: Async database session
            user_id: Identity-backend user UUID

        Returns:
            Role string ("admin" / "student"), None when no role is assigned
        """
        stmt = select(UserRoleModel.role).where(UserRoleModel.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


user_role_crud = UserRoleCRUD()
