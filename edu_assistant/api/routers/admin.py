"""Admin API endpoints.

Routes:
- GET /admin/verify - Confirm the caller is an admin and return dashboard stats

Dependencies: edu_assistant.application.services.admin_service
System role: Admin HTTP API
"""

from fastapi import APIRouter, Depends, Header

from edu_assistant.api.deps import get_admin_service
from edu_assistant.application.services.admin_service import AdminService
from edu_assistant.models.admin import AdminVerifyResponse

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/verify", response_model=AdminVerifyResponse)
async def verify_admin(
    authorization: str | None = Header(default=None),
    admin_service: AdminService = Depends(get_admin_service),
) -> AdminVerifyResponse:
    """401 without a valid credential, 403 for non-admins."""
    return await admin_service.verify(authorization)
