"""
Admin verification service.

Confirms the caller is an admin and returns dashboard counters.

Dependencies: edu_assistant.application.services.identity_service, edu_assistant.boundary.db
System role: Admin access check
"""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from edu_assistant.application.services.identity_service import IdentityService
from edu_assistant.boundary.db.base import utc_now
from edu_assistant.boundary.db.CRUD.activity_crud import activity_crud
from edu_assistant.boundary.db.CRUD.chat_message_crud import chat_message_crud
from edu_assistant.boundary.db.CRUD.student_crud import student_crud
from edu_assistant.boundary.db.models.user_role_model import Role
from edu_assistant.models.admin import AdminStats, AdminUser, AdminVerifyResponse

logger = logging.getLogger(__name__)

STATS_WINDOW = timedelta(hours=24)


class AdminService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        identity_service: IdentityService,
    ) -> None:
        self._session_factory = session_factory
        self._identity = identity_service

    async def verify(self, authorization: str | None) -> AdminVerifyResponse:
        """
        Authenticate an admin and collect statistics.

        Raises:
            AuthenticationError: Credential missing or rejected
            AuthorizationError: Caller is not an admin
        """
        identity = await self._identity.authenticate(authorization)
        self._identity.require_role(identity, Role.ADMIN)

        async with self._session_factory() as db:
            stats = AdminStats(
                total_students=await student_crud.count(db),
                total_activities=await activity_crud.count(db),
                active_activities=await activity_crud.count_active(db),
                chat_messages_today=await chat_message_crud.count_since(db, utc_now() - STATS_WINDOW),
            )

        logger.info(f"{__name__}:verify - Admin verified", extra={"user_id": str(identity.user_id)})
        return AdminVerifyResponse(
            is_admin=True,
            user=AdminUser(id=str(identity.user_id), email=identity.email),
            stats=stats,
        )
