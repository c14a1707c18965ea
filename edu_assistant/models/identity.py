"""
Identity models.

Dependencies: pydantic
System role: Caller identity passed between the identity gate and services
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class TokenClaims(BaseModel):
    """Verified claims extracted from a bearer token."""

    model_config = ConfigDict(extra="ignore")

    sub: UUID
    email: str | None = None
    exp: int | None = None


class Identity(BaseModel):
    """Authenticated caller."""

    model_config = ConfigDict(frozen=True)

    user_id: UUID
    email: str | None = None
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
