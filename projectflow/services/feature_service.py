"""
Feature catalog service
"""
import logging
import uuid
from typing import List, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from projectflow.core.exceptions import ResourceNotFoundError
from projectflow.core.permissions import ADMIN, VIEWER, require_project_access, find_visible_project
from projectflow.core.security import CurrentUser
from projectflow.models.feature import Feature
from projectflow.models.prompt import Prompt
from projectflow.models.task import Task
from projectflow.schemas.feature import FeatureCreate, FeatureUpdate

logger = logging.getLogger(__name__)


class FeatureService:
    """Service for a project's feature catalog"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_feature(self, feature_id: uuid.UUID) -> Feature:
        feature = await self.db.get(Feature, feature_id)
        if not feature:
            raise ResourceNotFoundError("Feature")
        return feature

    async def project_features(self, project_id: uuid.UUID) -> List[Feature]:
        result = await self.db.execute(
            select(Feature)
            .where(Feature.project_id == project_id)
            .order_by(Feature.created_at, Feature.title)
        )
        return list(result.scalars().all())

    async def list_features(self, user: CurrentUser, project_id: uuid.UUID) -> List[Feature]:
        project = await find_visible_project(self.db, project_id, user.user_id)
        if project is None:
            return []
        return await self.project_features(project.id)

    async def get_feature(self, user: CurrentUser, feature_id: uuid.UUID) -> Feature:
        feature = await self.load_feature(feature_id)
        await require_project_access(self.db, feature.project_id, user.user_id, VIEWER)
        return feature

    def build_feature(self, project_id: uuid.UUID, data: FeatureCreate, created_by: str) -> Feature:
        """New feature row added to the session; not flushed"""
        feature = Feature(
            project_id=project_id,
            title=data.title,
            description=data.description or "",
            priority=data.priority,
            effort=data.effort,
            category=data.category,
            implementation_details=data.implementation_details,
            ai_prompt=data.ai_prompt,
            created_by=created_by,
            added_to_task=False,
        )
        self.db.add(feature)
        return feature

    async def create_feature(self, user: CurrentUser, project_id: uuid.UUID, data: FeatureCreate) -> Feature:
        await require_project_access(
            self.db, project_id, user.user_id, ADMIN,
            "Access denied: You don't have permission to create features for this project"
        )
        feature = self.build_feature(project_id, data, user.user_id)
        await self.db.commit()

        logger.info("Feature created", extra={"project_id": str(project_id), "feature_id": str(feature.id)})
        return feature

    async def create_features(
        self,
        user: CurrentUser,
        project_id: uuid.UUID,
        items: Sequence[FeatureCreate]
    ) -> List[Feature]:
        await require_project_access(
            self.db, project_id, user.user_id, ADMIN,
            "Access denied: You don't have permission to create features for this project"
        )
        features = [self.build_feature(project_id, item, user.user_id) for item in items]
        await self.db.commit()

        logger.info("Features created", extra={"project_id": str(project_id), "count": len(features)})
        return features

    async def update_feature(self, user: CurrentUser, feature_id: uuid.UUID, patch: FeatureUpdate) -> Feature:
        feature = await self.load_feature(feature_id)
        await require_project_access(
            self.db, feature.project_id, user.user_id, ADMIN,
            "Access denied: You don't have permission to update features for this project"
        )

        for field, value in patch.model_dump(exclude_unset=True).items():
            if value is None and field in ("title", "description", "priority", "effort", "category"):
                continue
            setattr(feature, field, value)

        await self.db.commit()
        return feature

    async def delete_feature(self, user: CurrentUser, feature_id: uuid.UUID) -> None:
        """Delete a feature together with the task promoted from it and its prompts"""
        feature = await self.load_feature(feature_id)
        await require_project_access(
            self.db, feature.project_id, user.user_id, ADMIN,
            "Access denied: You don't have permission to delete features for this project"
        )

        tasks = await self.db.execute(delete(Task).where(Task.feature_id == feature.id))
        await self.db.execute(delete(Prompt).where(Prompt.feature_id == feature.id))
        await self.db.delete(feature)
        await self.db.commit()

        logger.info(
            "Feature deleted",
            extra={"feature_id": str(feature_id), "deleted_tasks": tasks.rowcount}
        )
