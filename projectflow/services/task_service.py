"""
Task board service
Handles feature promotion, manual tasks and ordered moves between status columns
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func

from projectflow.core.exceptions import ResourceNotFoundError, ValidationError
from projectflow.core.permissions import (
    MEMBER, VIEWER, require_project_access, find_visible_project, is_project_member, visible_project_ids
)
from projectflow.core.security import CurrentUser
from projectflow.models.feature import Feature
from projectflow.models.project import Project
from projectflow.models.task import Task, TASK_STATUSES
from projectflow.schemas.task import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

TASK_EDIT_DENIED = "Access denied: You don't have permission to modify tasks for this project"


def _board_order(task: Task):
    return (TASK_STATUSES.index(task.status), task.position, task.created_at)


class TaskService:
    """Service for the project task board"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_task(self, task_id: uuid.UUID) -> Task:
        task = await self.db.get(Task, task_id)
        if not task:
            raise ResourceNotFoundError("Task")
        return task

    async def _project_tasks(self, project_id: uuid.UUID) -> List[Task]:
        result = await self.db.execute(select(Task).where(Task.project_id == project_id))
        return sorted(result.scalars().all(), key=_board_order)

    async def _column(self, project_id: uuid.UUID, status: str,
                      exclude_id: Optional[uuid.UUID] = None) -> List[Task]:
        """Tasks in one status column, ordered by position"""
        query = select(Task).where(Task.project_id == project_id, Task.status == status)
        if exclude_id is not None:
            query = query.where(Task.id != exclude_id)
        result = await self.db.execute(query.order_by(Task.position, Task.created_at))
        return list(result.scalars().all())

    async def _next_position(self, project_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.max(Task.position)).where(Task.project_id == project_id)
        )
        return (result.scalar() or 0) + 1

    @staticmethod
    def _check_assignee(project: Project, assigned_to: Optional[str]) -> None:
        if assigned_to and not is_project_member(project, assigned_to):
            raise ValidationError("Can only assign tasks to project members")

    @staticmethod
    def _check_status(status: str) -> None:
        if status not in TASK_STATUSES:
            raise ValidationError(f"Status must be one of {', '.join(TASK_STATUSES)}")

    def _serialize_board(self, project_id: uuid.UUID, tasks: List[Task]) -> Dict[str, Any]:
        columns = {status: [] for status in TASK_STATUSES}
        for task in tasks:
            columns[task.status].append(task)
        return {
            "project_id": project_id,
            "columns": [{"status": status, "tasks": columns[status]} for status in TASK_STATUSES],
        }

    async def get_board(self, user: CurrentUser, project_id: uuid.UUID) -> Dict[str, Any]:
        """The four status columns in fixed order, each sorted by position"""
        access = await require_project_access(self.db, project_id, user.user_id, VIEWER)
        return self._serialize_board(access.project.id, await self._project_tasks(access.project.id))

    async def list_tasks(self, user: CurrentUser, project_id: uuid.UUID) -> List[Task]:
        project = await find_visible_project(self.db, project_id, user.user_id)
        if project is None:
            return []
        return await self._project_tasks(project.id)

    async def list_feature_tasks(self, user: CurrentUser, feature_id: uuid.UUID) -> List[Task]:
        feature = await self.db.get(Feature, feature_id)
        if feature is None:
            return []
        await require_project_access(self.db, feature.project_id, user.user_id, VIEWER)
        result = await self.db.execute(
            select(Task).where(Task.feature_id == feature_id).order_by(Task.created_at)
        )
        return list(result.scalars().all())

    async def list_all_tasks(self, user: CurrentUser) -> List[Task]:
        """Tasks across every project visible to the user"""
        project_ids = await visible_project_ids(self.db, user.user_id)
        if not project_ids:
            return []
        result = await self.db.execute(
            select(Task).where(Task.project_id.in_(project_ids)).order_by(Task.created_at.desc())
        )
        return list(result.scalars().all())

    async def add_feature_to_task(
        self,
        user: CurrentUser,
        project_id: uuid.UUID,
        feature_id: uuid.UUID,
        due_date: Optional[datetime] = None,
        assigned_to: Optional[str] = None
    ) -> Task:
        """Promote a feature to a todo task at the end of the board"""
        access = await require_project_access(self.db, project_id, user.user_id, MEMBER, TASK_EDIT_DENIED)

        feature = await self.db.get(Feature, feature_id)
        if not feature or feature.project_id != access.project.id:
            raise ResourceNotFoundError("Feature")
        if feature.added_to_task:
            raise ValidationError("Feature already added to a task")

        # Re-check the rows themselves so a stale flag cannot produce a second task
        existing = await self.db.execute(select(Task.id).where(Task.feature_id == feature.id).limit(1))
        if existing.first() is not None:
            raise ValidationError("Feature already added to a task")

        self._check_assignee(access.project, assigned_to)

        task = Task(
            project_id=access.project.id,
            feature_id=feature.id,
            title=feature.title,
            description=feature.description or "",
            status="todo",
            position=await self._next_position(access.project.id),
            priority=feature.priority,
            effort=feature.effort,
            category=feature.category,
            due_date=due_date,
            assigned_to=assigned_to,
        )
        self.db.add(task)
        feature.added_to_task = True
        await self.db.commit()

        logger.info(
            "Feature promoted to task",
            extra={"project_id": str(project_id), "feature_id": str(feature_id), "task_id": str(task.id)}
        )
        return task

    async def remove_feature_from_task(self, user: CurrentUser, feature_id: uuid.UUID) -> int:
        """Delete every task derived from the feature and clear its flag; returns the number removed"""
        feature = await self.db.get(Feature, feature_id)
        if not feature:
            raise ResourceNotFoundError("Feature")
        await require_project_access(self.db, feature.project_id, user.user_id, MEMBER, TASK_EDIT_DENIED)

        result = await self.db.execute(delete(Task).where(Task.feature_id == feature.id))
        feature.added_to_task = False
        await self.db.commit()

        logger.info(
            "Feature removed from tasks",
            extra={"feature_id": str(feature_id), "deleted_tasks": result.rowcount}
        )
        return result.rowcount

    async def create_task(self, user: CurrentUser, project_id: uuid.UUID, data: TaskCreate) -> Task:
        access = await require_project_access(self.db, project_id, user.user_id, MEMBER, TASK_EDIT_DENIED)
        self._check_status(data.status)
        self._check_assignee(access.project, data.assigned_to)

        task = Task(
            project_id=access.project.id,
            title=data.title,
            description=data.description or "",
            status=data.status,
            position=await self._next_position(access.project.id),
            priority=data.priority or "Medium",
            effort=data.effort or "Medium",
            category=data.category or "Core",
            due_date=data.due_date,
            assigned_to=data.assigned_to,
        )
        self.db.add(task)
        await self.db.commit()

        logger.info("Task created", extra={"project_id": str(project_id), "task_id": str(task.id)})
        return task

    async def _apply_move(self, task: Task, destination_status: str, destination_index: int) -> bool:
        """Reposition a task and its siblings; returns False when nothing changed"""
        if task.status == destination_status:
            column = await self._column(task.project_id, task.status)
            current_index = next(i for i, t in enumerate(column) if t.id == task.id)
            index = min(destination_index, len(column) - 1)
            if index == current_index:
                return False

            column.pop(current_index)
            column.insert(index, task)
            for position, sibling in enumerate(column):
                if sibling.position != position:
                    sibling.position = position
            return True

        # Close the gap left in the source column
        for sibling in await self._column(task.project_id, task.status, exclude_id=task.id):
            if sibling.position > task.position:
                sibling.position -= 1

        # Open a slot in the destination column
        destination = await self._column(task.project_id, destination_status)
        index = min(destination_index, len(destination))
        if index < len(destination):
            new_position = destination[index].position
        elif destination:
            new_position = destination[-1].position + 1
        else:
            new_position = 0

        for sibling in destination:
            if sibling.position >= new_position:
                sibling.position += 1

        task.status = destination_status
        task.position = new_position
        return True

    async def move_task(
        self,
        user: CurrentUser,
        task_id: uuid.UUID,
        destination_status: str,
        destination_index: int
    ) -> Dict[str, Any]:
        """Move a task to an index within a status column and return the resulting board.

        Every sibling whose position changes is written in the same transaction,
        so positions within each column stay strictly ordered.
        """
        task = await self.load_task(task_id)
        await require_project_access(self.db, task.project_id, user.user_id, MEMBER, TASK_EDIT_DENIED)
        self._check_status(destination_status)
        if destination_index < 0:
            raise ValidationError("Index must be non-negative")

        source_status = task.status
        if await self._apply_move(task, destination_status, destination_index):
            await self.db.commit()
            logger.info(
                "Task moved",
                extra={
                    "task_id": str(task_id),
                    "from_status": source_status,
                    "to_status": destination_status,
                    "position": task.position,
                }
            )

        return self._serialize_board(task.project_id, await self._project_tasks(task.project_id))

    async def update_task_status(self, user: CurrentUser, task_id: uuid.UUID, status: str) -> Task:
        """Move a task to the end of another column"""
        task = await self.load_task(task_id)
        await require_project_access(self.db, task.project_id, user.user_id, MEMBER, TASK_EDIT_DENIED)
        self._check_status(status)

        if status != task.status:
            end = len(await self._column(task.project_id, status))
            await self._apply_move(task, status, end)
            await self.db.commit()
        return task

    async def update_task(self, user: CurrentUser, task_id: uuid.UUID, patch: TaskUpdate) -> Task:
        task = await self.load_task(task_id)
        await require_project_access(self.db, task.project_id, user.user_id, MEMBER, TASK_EDIT_DENIED)

        for field, value in patch.model_dump(exclude_unset=True).items():
            if value is None and field in ("title", "description"):
                continue
            setattr(task, field, value)

        await self.db.commit()
        return task

    async def update_task_assignment(self, user: CurrentUser, task_id: uuid.UUID,
                                     assigned_to: Optional[str]) -> Task:
        task = await self.load_task(task_id)
        access = await require_project_access(self.db, task.project_id, user.user_id, MEMBER, TASK_EDIT_DENIED)
        self._check_assignee(access.project, assigned_to)

        task.assigned_to = assigned_to or None
        await self.db.commit()
        return task

    async def update_task_notes(self, user: CurrentUser, task_id: uuid.UUID, notes: str) -> Task:
        task = await self.load_task(task_id)
        await require_project_access(self.db, task.project_id, user.user_id, VIEWER)

        task.notes = notes
        await self.db.commit()
        return task

    async def delete_task(self, user: CurrentUser, task_id: uuid.UUID) -> None:
        task = await self.load_task(task_id)
        await require_project_access(self.db, task.project_id, user.user_id, MEMBER, TASK_EDIT_DENIED)

        if task.feature_id:
            feature = await self.db.get(Feature, task.feature_id)
            remaining = await self.db.execute(
                select(func.count(Task.id)).where(Task.feature_id == task.feature_id, Task.id != task.id)
            )
            if feature and not remaining.scalar():
                feature.added_to_task = False

        for sibling in await self._column(task.project_id, task.status, exclude_id=task.id):
            if sibling.position > task.position:
                sibling.position -= 1

        await self.db.delete(task)
        await self.db.commit()
        logger.info("Task deleted", extra={"task_id": str(task_id)})
