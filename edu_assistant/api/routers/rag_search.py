"""Search API endpoints.

Routes:
- POST /rag-search - Hybrid vector + keyword search over document chunks
- OPTIONS /rag-search - CORS preflight

Dependencies: edu_assistant.application.services.retrieval_service
System role: Retrieval HTTP API
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from edu_assistant.api.deps import get_retrieval_service, get_settings_dependency
from edu_assistant.api.routers.cors import preflight_response
from edu_assistant.application.services.retrieval_service import RetrievalService
from edu_assistant.configs import Settings
from edu_assistant.core.sanitizer import sanitize_text
from edu_assistant.models.retrieval import RagSearchRequest, RagSearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


@router.options("/rag-search")
async def rag_search_preflight() -> PlainTextResponse:
    return preflight_response()


@router.post("/rag-search", response_model=RagSearchResponse)
async def rag_search(
    request: RagSearchRequest,
    retrieval_service: RetrievalService = Depends(get_retrieval_service),
    settings: Settings = Depends(get_settings_dependency),
) -> RagSearchResponse:
    """Search document chunks by meaning and by keyword.

    Vector hits come first; keyword hits fill the remaining slots. A failed
    search degrades to the other one; when both fail the response is an
    empty result list. The search runs on the sanitized query while the
    response echoes the query as sent.

    Raises:
        ValidationError(400): Missing or empty query
        UpstreamError(500): Embedding failed
    """
    result = await retrieval_service.search(
        sanitize_text(request.query or ""),
        match_threshold=(
            request.match_threshold
            if request.match_threshold is not None
            else settings.retrieval.match_threshold
        ),
        match_count=request.match_count or settings.retrieval.match_count,
    )

    return RagSearchResponse(
        results=result.results,
        query=request.query,
        total_found=len(result.results),
        search_types=result.search_types,
    )
