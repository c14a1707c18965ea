"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin, CreatedAtMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), dispose_engine(): Async connection management

Dependencies: sqlalchemy, edu_assistant.configs
System role: Database adapter for students, activities, roles, prompt
settings, the chat log and the document chunk corpus.
"""

from edu_assistant.boundary.db.base import Base, CreatedAtMixin, TimestampMixin, UUIDMixin
from edu_assistant.boundary.db.connection import (
    dispose_engine,
    get_async_engine,
    get_async_session_factory,
)

__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "UUIDMixin",
    "dispose_engine",
    "get_async_engine",
    "get_async_session_factory",
]
