"""
Exception handlers.

Maps the application exception hierarchy to JSON error bodies of the form
{"error": <error_code>, "detail": <message>}. Internal details and stack
traces stay in the logs.

Dependencies: fastapi, edu_assistant.core.exceptions, edu_assistant.observability
System role: HTTP error translation
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from edu_assistant.core.exceptions import EduAssistantError, RateLimitError
from edu_assistant.models.common import ErrorResponse
from edu_assistant.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "internal_error"


def error_response(status_code: int, error: str, detail: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
        headers=headers,
    )


async def handle_app_error(request: Request, exc: EduAssistantError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{__name__}:handle_app_error - {exc.error_code} on {request.method} {request.url.path}: {exc.message}",
        extra={"status_code": exc.status_code, "error_code": exc.error_code},
    )

    headers = None
    if isinstance(exc, RateLimitError) and exc.retry_after is not None:
        headers = {"Retry-After": str(max(1, int(round(exc.retry_after))))}

    return error_response(exc.status_code, exc.error_code, exc.message, headers)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    detail = f"{location}: {message}" if location else message

    logger.warning(f"{__name__}:handle_request_validation - {request.url.path}: {detail}")
    return error_response(status.HTTP_400_BAD_REQUEST, "validation_error", detail)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    log_exception_with_context(
        logger,
        f"{__name__}:handle_unexpected - Unhandled error on {request.method} {request.url.path}",
        exc,
        path=request.url.path,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        INTERNAL_ERROR,
        "An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EduAssistantError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
