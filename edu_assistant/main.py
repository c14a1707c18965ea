"""
Application entry point.

Exposes the ASGI app for `uvicorn edu_assistant.main:app`.

Dependencies: edu_assistant.api, uvicorn
System role: Server launch
"""

from edu_assistant.api.main import app, create_app

__all__ = ["app", "create_app"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "edu_assistant.main:app",
        host="localhost",
        port=8082,
        reload=True,
    )
