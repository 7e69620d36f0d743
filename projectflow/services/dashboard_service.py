"""
Dashboard aggregation service
Read-only rollups over every project visible to the user
"""
import uuid
from typing import Any, Dict, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from projectflow.core.security import CurrentUser
from projectflow.core.permissions import visible_project_ids
from projectflow.models.feature import Feature, FEATURE_PRIORITIES, FEATURE_EFFORTS
from projectflow.models.project import Project, PROJECT_STATUSES
from projectflow.models.task import Task, TASK_STATUSES

RECENT_PROJECTS = 5


class DashboardService:
    """Service for dashboard statistics"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _visible_projects(self, user: CurrentUser) -> List[Project]:
        project_ids = await visible_project_ids(self.db, user.user_id)
        if not project_ids:
            return []
        result = await self.db.execute(
            select(Project).where(Project.id.in_(project_ids)).order_by(Project.created_at.desc())
        )
        return list(result.scalars().all())

    async def _count_by(self, column, project_ids: List[uuid.UUID]) -> Dict[str, int]:
        model = column.class_
        result = await self.db.execute(
            select(column, func.count()).where(model.project_id.in_(project_ids)).group_by(column)
        )
        return {key: count for key, count in result.all()}

    async def get_dashboard_stats(self, user: CurrentUser) -> Dict[str, Any]:
        projects = await self._visible_projects(user)
        project_ids = [p.id for p in projects]

        projects_by_status = {status: 0 for status in PROJECT_STATUSES}
        for project in projects:
            projects_by_status[project.status] = projects_by_status.get(project.status, 0) + 1

        tasks_by_status = {status: 0 for status in TASK_STATUSES}
        if project_ids:
            tasks_by_status.update(await self._count_by(Task.status, project_ids))

        return {
            "total_projects": len(projects),
            "projects_by_status": projects_by_status,
            "member_projects_count": sum(1 for p in projects if p.owner_id != user.user_id),
            "tasks_by_status": tasks_by_status,
            "total_tasks": sum(tasks_by_status.values()),
            "recent_projects": projects[:RECENT_PROJECTS],
        }

    async def get_recent_activities(self, user: CurrentUser, limit: int = 10) -> List[Dict[str, Any]]:
        """Project, task and feature creation events, newest first"""
        projects = await self._visible_projects(user)
        if not projects:
            return []
        by_id = {p.id: p for p in projects}

        tasks = await self.db.execute(
            select(Task).where(Task.project_id.in_(list(by_id))).order_by(Task.created_at.desc()).limit(limit)
        )
        features = await self.db.execute(
            select(Feature).where(Feature.project_id.in_(list(by_id))).order_by(Feature.created_at.desc()).limit(limit)
        )

        activities = [
            {"type": "project_created", "timestamp": p.created_at, "project_id": p.id,
             "project_name": p.name, "data": {"name": p.name}}
            for p in projects[:limit]
        ]
        activities += [
            {"type": "task_created", "timestamp": t.created_at, "project_id": t.project_id,
             "project_name": by_id[t.project_id].name, "data": {"title": t.title, "status": t.status}}
            for t in tasks.scalars().all()
        ]
        activities += [
            {"type": "feature_created", "timestamp": f.created_at, "project_id": f.project_id,
             "project_name": by_id[f.project_id].name, "data": {"title": f.title, "priority": f.priority}}
            for f in features.scalars().all()
        ]

        activities.sort(key=lambda a: a["timestamp"], reverse=True)
        return activities[:limit]

    async def get_project_stats_by_category(self, user: CurrentUser) -> Dict[str, int]:
        categories: Dict[str, int] = {}
        for project in await self._visible_projects(user):
            category = project.category or "Uncategorized"
            categories[category] = categories.get(category, 0) + 1
        return categories

    async def get_feature_stats(self, user: CurrentUser) -> Dict[str, Dict[str, int]]:
        project_ids = await visible_project_ids(self.db, user.user_id)

        by_priority = {priority: 0 for priority in FEATURE_PRIORITIES}
        by_effort = {effort: 0 for effort in FEATURE_EFFORTS}
        by_category: Dict[str, int] = {}
        if project_ids:
            by_priority.update(await self._count_by(Feature.priority, project_ids))
            by_effort.update(await self._count_by(Feature.effort, project_ids))
            by_category.update(await self._count_by(Feature.category, project_ids))

        return {
            "by_priority": by_priority,
            "by_effort": by_effort,
            "by_category": by_category,
        }
