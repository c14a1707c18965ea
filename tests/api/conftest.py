"""
Fixtures for HTTP endpoint tests.

Builds the routers on a bare FastAPI app and swaps services for mocks
through dependency_overrides.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from edu_assistant.api import api_router
from edu_assistant.api.deps import get_settings_dependency
from edu_assistant.api.errors import register_exception_handlers
from edu_assistant.configs import Settings


@pytest.fixture
def app() -> FastAPI:
    application = FastAPI()
    register_exception_handlers(application)
    application.include_router(api_router, prefix="/api/v1")
    application.dependency_overrides[get_settings_dependency] = lambda: Settings()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)
