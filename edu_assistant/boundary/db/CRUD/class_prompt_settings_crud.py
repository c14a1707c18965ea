"""
Class prompt settings CRUD operations.

Dependencies: sqlalchemy, edu_assistant.boundary.db.models
System role: Prompt configuration lookup
"""

from sqlalchemy.ext.asyncio import AsyncSession

from edu_assistant.boundary.db.CRUD.base_crud import BaseCRUD
from edu_assistant.boundary.db.models.class_prompt_settings_model import ClassPromptSettingsModel


class ClassPromptSettingsCRUD(BaseCRUD[ClassPromptSettingsModel]):
    """CRUD operations for ClassPromptSettingsModel."""

    def __init__(self) -> None:
        super().__init__(ClassPromptSettingsModel)

    async def get_for(
        self,
        session: AsyncSession,
        class_name: str,
        activity_type: str,
    ) -> ClassPromptSettingsModel | None:
        """
        Retrieve settings for a class and activity type.

        Args:
            session: Async database session
            class_name: Student's class
            activity_type: Activity type value

        Returns:
            Matching settings row, None when the pair is not configured
        """
        return await self.first(
            session,
            ClassPromptSettingsModel.class_name == class_name,
            ClassPromptSettingsModel.activity_type == activity_type,
            order_by=ClassPromptSettingsModel.updated_at.desc(),
        )


class_prompt_settings_crud = ClassPromptSettingsCRUD()
