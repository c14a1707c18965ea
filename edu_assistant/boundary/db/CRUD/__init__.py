"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from edu_assistant.boundary.db.CRUD import student_crud, chat_message_crud

    student = await student_crud.get_by_id(db, student_id)
"""

from edu_assistant.boundary.db.CRUD.activity_crud import ActivityCRUD, activity_crud
from edu_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from edu_assistant.boundary.db.CRUD.chat_message_crud import ChatMessageCRUD, chat_message_crud
from edu_assistant.boundary.db.CRUD.class_prompt_settings_crud import (
    ClassPromptSettingsCRUD,
    class_prompt_settings_crud,
)
from edu_assistant.boundary.db.CRUD.document_chunk_crud import DocumentChunkCRUD, document_chunk_crud
from edu_assistant.boundary.db.CRUD.question_frequency_crud import (
    QuestionFrequencyCRUD,
    question_frequency_crud,
)
from edu_assistant.boundary.db.CRUD.student_crud import (
    StudentCRUD,
    StudentSessionCRUD,
    student_crud,
    student_session_crud,
)
from edu_assistant.boundary.db.CRUD.user_role_crud import UserRoleCRUD, user_role_crud

__all__ = [
    "BaseCRUD",
    "ActivityCRUD",
    "activity_crud",
    "ChatMessageCRUD",
    "chat_message_crud",
    "ClassPromptSettingsCRUD",
    "class_prompt_settings_crud",
    "DocumentChunkCRUD",
    "document_chunk_crud",
    "QuestionFrequencyCRUD",
    "question_frequency_crud",
    "StudentCRUD",
    "StudentSessionCRUD",
    "student_crud",
    "student_session_crud",
    "UserRoleCRUD",
    "user_role_crud",
]
