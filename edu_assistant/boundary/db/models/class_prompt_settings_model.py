"""
Class prompt settings ORM model.

Per class and activity type overrides of the generation model, sampling
parameters and prompt template.

Dependencies: sqlalchemy, edu_assistant.boundary.db.base
System role: Prompt personalisation persistence
"""

from sqlalchemy import Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from edu_assistant.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ClassPromptSettingsModel(Base, UUIDMixin, TimestampMixin):
    """
    Prompt configuration for one (class_name, activity_type) pair.

    Attributes:
        prompt_template: Template with {student_name}, {activity_title} and {question} placeholders
        ai_model: Generation model name
        temperature: Sampling temperature
        max_tokens: Output token ceiling
    """

    __tablename__ = "class_prompt_settings"
    __table_args__ = (UniqueConstraint("class_name", "activity_type"),)

    class_name: Mapped[str] = mapped_column(String(128), nullable=False)
    activity_type: Mapped[str] = mapped_column(String(32), nullable=False)
    prompt_template: Mapped[str] = mapped_column(Text, nullable=False)
    ai_model: Mapped[str | None] = mapped_column(String(128), nullable=True)
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_tokens: Mapped[int | None] = mapped_column(Integer, nullable=True)
