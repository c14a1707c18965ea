"""
Chat domain models and schemas.

Request/response schemas for the chat endpoint plus the validated request
and log record types passed between pipeline stages. Wire names are
camelCase; Python attributes stay snake_case.

Dependencies: pydantic
System role: Chat API contracts
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """
    Request schema for chat messages.

    message and studentId are optional at the schema level so their absence
    is reported with the pipeline's own validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str | None = Field(default=None, description="Student question or message")
    student_id: str | None = Field(default=None, alias="studentId")
    activity_id: str | None = Field(default=None, alias="activityId")
    stream: bool = Field(default=False, description="Stream the answer as server-sent events")
    use_rag: bool = Field(default=False, alias="useRag", description="Ground the answer in retrieved chunks")


class ValidatedChatRequest(BaseModel):
    """Chat request after required-field validation and sanitization."""

    model_config = ConfigDict(frozen=True)

    message: str
    student_id: UUID
    activity_id: UUID | None = None
    stream: bool = False
    use_rag: bool = False


class ChatResponse(BaseModel):
    """Response schema for batch chat."""

    model_config = ConfigDict(populate_by_name=True)

    response: str
    tokens_used: int = Field(alias="tokensUsed")
    model: str
    rag_used: bool = Field(alias="ragUsed")


class ChatMessage(BaseModel):
    """One turn written to the chat log."""

    model_config = ConfigDict(frozen=True)

    student_id: UUID
    activity_id: UUID | None = None
    role: str = Field(description="Message role: 'user' or 'assistant'")
    content: str
    model_used: str | None = None
    tokens_used: int | None = None
