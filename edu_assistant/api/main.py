"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers, middleware and exception
handlers.

Dependencies: fastapi, edu_assistant.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from edu_assistant.api import api_router
from edu_assistant.api.deps.dependencies import get_service_cache
from edu_assistant.api.errors import register_exception_handlers
from edu_assistant.boundary.db import dispose_engine
from edu_assistant.configs import Settings, get_settings
from edu_assistant.observability.logger import configure_logging
from edu_assistant.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "Application startup: logging configured",
        extra={"environment": settings.environment},
    )

    yield

    # Shutdown
    get_service_cache().clear()
    await dispose_engine()
    logger.info("Application shutdown: service cache cleared, engine disposed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Edu Assistant API",
        description="Student learning assistant with retrieval-augmented chat",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add observability middleware (added first = last to execute)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "edu_assistant.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
