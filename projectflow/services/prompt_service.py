"""
Implementation prompt generation and storage
"""
import logging
import uuid
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from projectflow.core.exceptions import InsufficientPermissionsError, ResourceNotFoundError, ValidationError
from projectflow.core.permissions import (
    OWNER, can_manage_project, require_project_access, find_visible_project
)
from projectflow.core.security import CurrentUser
from projectflow.models.feature import Feature
from projectflow.models.project import Project
from projectflow.models.prompt import Prompt
from projectflow.services.ai_service import AIService

logger = logging.getLogger(__name__)

PROMPTS_STEP = 5


class PromptService:
    """Service for AI implementation prompts"""

    def __init__(self, db: AsyncSession, ai_service: Optional[AIService] = None):
        self.db = db
        self.ai_service = ai_service or AIService()

    async def _features(self, project_id: uuid.UUID) -> List[Feature]:
        result = await self.db.execute(
            select(Feature).where(Feature.project_id == project_id).order_by(Feature.created_at)
        )
        return list(result.scalars().all())

    async def build_prompt(self, project: Project, user_id: str,
                           feature_id: Optional[uuid.UUID] = None) -> Prompt:
        """Generate and stage a prompt for the project or one promoted feature; does not commit"""
        if feature_id is None:
            content = await self.ai_service.generate_project_prompt(
                project.name, project.description, await self._features(project.id)
            )
            prompt_type = "project"
        else:
            feature = await self.db.get(Feature, feature_id)
            if not feature or feature.project_id != project.id:
                raise ResourceNotFoundError("Feature")
            if not feature.added_to_task:
                raise ValidationError("Prompts can only be generated for features that have been added to tasks")
            content = await self.ai_service.generate_feature_prompt(project.name, project.description, feature)
            prompt_type = "feature"

        prompt = Prompt(
            project_id=project.id,
            feature_id=feature_id,
            content=content,
            type=prompt_type,
            user_id=user_id,
        )
        self.db.add(prompt)
        project.prompts_generated = True
        return prompt

    async def generate_prompt(self, user: CurrentUser, project_id: uuid.UUID,
                              feature_id: Optional[uuid.UUID] = None) -> Prompt:
        access = await require_project_access(self.db, project_id, user.user_id, OWNER)
        if access.project.last_edited_step < PROMPTS_STEP:
            raise ValidationError("Complete the features step first")

        prompt = await self.build_prompt(access.project, user.user_id, feature_id)
        await self.db.commit()

        logger.info(
            "Prompt generated",
            extra={"project_id": str(project_id), "prompt_type": prompt.type}
        )
        return prompt

    async def list_project_prompts(self, user: CurrentUser, project_id: uuid.UUID) -> List[Prompt]:
        project = await find_visible_project(self.db, project_id, user.user_id)
        if project is None:
            return []
        result = await self.db.execute(
            select(Prompt).where(Prompt.project_id == project.id).order_by(Prompt.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_feature_prompts(self, user: CurrentUser, feature_id: uuid.UUID) -> List[Prompt]:
        feature = await self.db.get(Feature, feature_id)
        if feature is None or await find_visible_project(self.db, feature.project_id, user.user_id) is None:
            return []
        result = await self.db.execute(
            select(Prompt).where(Prompt.feature_id == feature_id).order_by(Prompt.created_at.desc())
        )
        return list(result.scalars().all())

    async def delete_prompt(self, user: CurrentUser, prompt_id: uuid.UUID) -> None:
        prompt = await self.db.get(Prompt, prompt_id)
        if not prompt:
            raise ResourceNotFoundError("Prompt")

        access = await require_project_access(self.db, prompt.project_id, user.user_id)
        if prompt.user_id != user.user_id and not can_manage_project(access.role):
            raise InsufficientPermissionsError("Only the author or a project admin can delete this prompt")

        await self.db.delete(prompt)
        await self.db.commit()
