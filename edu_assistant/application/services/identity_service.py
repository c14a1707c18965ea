"""
Identity and access gate.

Turns an Authorization header into an authenticated Identity and checks
roles. Read-only: never writes to any store.

Dependencies: edu_assistant.boundary.auth, edu_assistant.boundary.db
System role: Identity gate stage of the request pipeline
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from edu_assistant.boundary.auth.token_verifier import TokenVerifier, extract_bearer_token
from edu_assistant.boundary.db.CRUD.user_role_crud import user_role_crud
from edu_assistant.boundary.db.models.user_role_model import Role
from edu_assistant.core.exceptions import AuthorizationError
from edu_assistant.models.identity import Identity

logger = logging.getLogger(__name__)


class IdentityService:
    """Authenticate callers and enforce roles."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        verifier: TokenVerifier,
    ) -> None:
        self._session_factory = session_factory
        self._verifier = verifier

    async def authenticate(self, authorization: str | None) -> Identity:
        """
        Resolve the caller behind a bearer credential.

        Args:
            authorization: Raw Authorization header value

        Returns:
            Identity: Caller id, email and role (None when no role is assigned)

        Raises:
            AuthenticationError: Credential absent, malformed, expired or rejected
        """
        token = extract_bearer_token(authorization)
        claims = self._verifier.verify(token)
        role = await self.lookup_role(claims.sub)

        logger.info(
            f"{__name__}:authenticate - Caller authenticated",
            extra={"user_id": str(claims.sub), "role": role},
        )
        return Identity(user_id=claims.sub, email=claims.email, role=role)

    async def lookup_role(self, user_id) -> str | None:
        async with self._session_factory() as db:
            return await user_role_crud.get_role(db, user_id)

    @staticmethod
    def require_role(identity: Identity, role: Role | str) -> None:
        """
        Ensure the identity holds a role. Admins satisfy every role.

        Raises:
            AuthorizationError: Role missing
        """
        required = role.value if isinstance(role, Role) else role
        if identity.role == Role.ADMIN.value or identity.role == required:
            return

        logger.warning(
            f"{__name__}:require_role - Access denied",
            extra={"user_id": str(identity.user_id), "required": required, "role": identity.role},
        )
        if required == Role.ADMIN.value:
            raise AuthorizationError("Admin access required")
        raise AuthorizationError(f"Role '{required}' required")
