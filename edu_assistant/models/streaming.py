"""
Streaming event schemas for server-sent chat.

Defines event types and payloads for real-time chat streaming.
Every stream ends with exactly one COMPLETE or ERROR event.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel


class StreamEventType(str, Enum):
    """Server-to-client event types for streaming chat."""

    CONTEXT = "context"
    TOKEN = "token"
    COMPLETE = "complete"
    ERROR = "error"


class StreamEvent(BaseModel):
    """
    Base streaming event model.

    Attributes:
        event: Event type identifier
        data: Event-specific payload
    """

    event: StreamEventType
    data: dict[str, Any]

    @property
    def is_terminal(self) -> bool:
        return self.event in (StreamEventType.COMPLETE, StreamEventType.ERROR)

    def to_sse(self) -> str:
        """Encode as a server-sent event frame."""
        return f"event: {self.event.value}\ndata: {json.dumps(self.data)}\n\n"
