"""Chat API endpoints.

Routes:
- POST /ai-chat - Answer a student message (JSON, or SSE when stream is set)
- OPTIONS /ai-chat - CORS preflight

Dependencies: edu_assistant.application.services.chat_service
System role: Chat messaging HTTP API with streaming support
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from edu_assistant.api.deps import get_chat_service
from edu_assistant.api.routers.cors import CORS_HEADERS, preflight_response
from edu_assistant.application.services.chat_service import ChatService
from edu_assistant.models.chat import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.options("/ai-chat")
async def chat_preflight() -> PlainTextResponse:
    return preflight_response()


@router.post("/ai-chat", response_model=ChatResponse)
async def chat(
    http_request: Request,
    request: ChatRequest,
    authorization: str | None = Header(default=None),
    chat_service: ChatService = Depends(get_chat_service),
):
    """Answer a student message.

    Every check (validation, identity, rate limit, student lookup, retrieval)
    runs before the response starts, so failures still map to proper status
    codes when streaming is requested. Errors raised after the first byte are
    delivered as an SSE error event.

    SSE Format:
        event: context
        data: {"chunks": [...]}

        event: token
        data: {"token": "...", "index": 0}

        event: complete
        data: {"full_answer": "...", "model": "...", "ragUsed": false}

        event: error
        data: {"error": "...", "detail": "..."}

    Args:
        http_request: Raw request (used to detect client disconnects)
        request: ChatRequest body
        authorization: Bearer credential
        chat_service: Injected ChatService

    Returns:
        ChatResponse or StreamingResponse
    """
    exchange = await chat_service.prepare_exchange(request, authorization)

    if not exchange.request.stream:
        result = await chat_service.complete(exchange)
        return result.to_response()

    logger.info(
        f"{__name__}:chat - START stream student_id={exchange.request.student_id}",
        extra={"rag_used": exchange.rag_used},
    )

    async def event_generator() -> AsyncGenerator[str, None]:
        """Generate SSE frames from chat stream."""
        async for event in chat_service.stream_chat(exchange, is_disconnected=http_request.is_disconnected):
            yield event.to_sse()
        logger.info(f"{__name__}:chat - Stream closed for student_id={exchange.request.student_id}")

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
            **CORS_HEADERS,
        },
    )
