"""
Common response models.

Dependencies: pydantic
System role: Common API response structures
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error response schema shared by every endpoint."""

    error: str = Field(description="Stable machine-readable error code")
    detail: str = Field(description="Human-readable error message")
