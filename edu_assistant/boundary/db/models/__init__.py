"""
Database models package.

Exports:
  - StudentModel, StudentSessionModel: Students and their online status
  - ActivityModel, ActivityType: Learning activities
  - UserRoleModel, Role: Identity roles
  - ClassPromptSettingsModel: Per-class prompt configuration
  - ChatMessageModel, MessageRole: Append-only chat log
  - QuestionFrequencyModel: Question analytics
  - DocumentChunkModel: Retrieval corpus

Dependencies: sqlalchemy, edu_assistant.boundary.db.base
System role: Database model definitions for domain entities
"""

from edu_assistant.boundary.db.models.activity_model import ActivityModel, ActivityType
from edu_assistant.boundary.db.models.chat_message_model import ChatMessageModel, MessageRole
from edu_assistant.boundary.db.models.class_prompt_settings_model import ClassPromptSettingsModel
from edu_assistant.boundary.db.models.document_chunk_model import DocumentChunkModel
from edu_assistant.boundary.db.models.question_frequency_model import QuestionFrequencyModel
from edu_assistant.boundary.db.models.student_model import StudentModel, StudentSessionModel
from edu_assistant.boundary.db.models.user_role_model import Role, UserRoleModel

__all__ = [
    "StudentModel",
    "StudentSessionModel",
    "ActivityModel",
    "ActivityType",
    "UserRoleModel",
    "Role",
    "ClassPromptSettingsModel",
    "ChatMessageModel",
    "MessageRole",
    "QuestionFrequencyModel",
    "DocumentChunkModel",
]
