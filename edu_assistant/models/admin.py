"""
Admin verification schemas.

Dependencies: pydantic
System role: Admin API contracts
"""

from pydantic import BaseModel, ConfigDict, Field


class AdminUser(BaseModel):
    id: str
    email: str | None = None


class AdminStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_students: int = Field(alias="totalStudents")
    total_activities: int = Field(alias="totalActivities")
    active_activities: int = Field(alias="activeActivities")
    chat_messages_today: int = Field(alias="chatMessagesToday")


class AdminVerifyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_admin: bool = Field(alias="isAdmin")
    user: AdminUser
    stats: AdminStats
