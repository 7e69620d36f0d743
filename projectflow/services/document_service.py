"""
Project documentation and feature implementation guides

Both are generated on demand for any collaborator and are not stored.
"""
import logging
import uuid
from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from projectflow.core.db_types import utcnow
from projectflow.core.exceptions import ResourceNotFoundError, ValidationError
from projectflow.core.permissions import VIEWER, require_project_access
from projectflow.core.security import CurrentUser
from projectflow.models.feature import Feature
from projectflow.schemas.ai import ImplementationGuide
from projectflow.services.ai_service import AIService, tech_stack_label

logger = logging.getLogger(__name__)


class DocumentService:
    """Service for generated project documentation"""

    def __init__(self, db: AsyncSession, ai_service: Optional[AIService] = None):
        self.db = db
        self.ai_service = ai_service or AIService()

    async def generate_documentation(self, user: CurrentUser, project_id: uuid.UUID) -> Dict[str, Any]:
        access = await require_project_access(self.db, project_id, user.user_id, VIEWER)
        project = access.project
        if not project.name or not project.description:
            raise ValidationError("Project name and description are required")

        result = await self.db.execute(
            select(Feature).where(Feature.project_id == project.id).order_by(Feature.created_at)
        )
        tech_stack = tech_stack_label(project.tech_stack)
        content = await self.ai_service.generate_documentation(
            project.name, project.description, tech_stack, list(result.scalars().all()), project.summary
        )

        logger.info("Project documentation generated", extra={"project_id": str(project_id)})
        return {
            "project_id": project.id,
            "title": f"{project.name} Documentation",
            "tech_stack": tech_stack or None,
            "content": content,
            "generated_at": utcnow(),
        }

    async def generate_implementation_guide(self, user: CurrentUser, feature_id: uuid.UUID) -> ImplementationGuide:
        feature = await self.db.get(Feature, feature_id)
        if not feature:
            raise ResourceNotFoundError("Feature")
        access = await require_project_access(self.db, feature.project_id, user.user_id, VIEWER)
        if not feature.description or not feature.description.strip():
            raise ValidationError("Feature title and description are required")

        project = access.project
        context = f"{project.name}: {project.description}" if project.description else project.name
        return await self.ai_service.generate_implementation_guide(
            feature.title, feature.description, context, tech_stack_label(project.tech_stack) or None
        )
