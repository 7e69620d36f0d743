"""
Task board endpoints
"""
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectflow.core.database import get_db
from projectflow.core.deps import get_current_user
from projectflow.core.security import CurrentUser
from projectflow.schemas.task import (
    PromoteFeatureRequest, TaskCreate, TaskUpdate, TaskMoveRequest, TaskStatusUpdate,
    TaskAssignmentUpdate, TaskNotesUpdate, TaskResponse, BoardResponse
)
from projectflow.services.task_service import TaskService

router = APIRouter()


@router.get("/projects/{project_id}/board", response_model=BoardResponse)
async def get_board(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The four status columns, each ordered by position"""
    return await TaskService(db).get_board(current_user, project_id)


@router.get("/projects/{project_id}/tasks", response_model=List[TaskResponse])
async def list_tasks(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    tasks = await TaskService(db).list_tasks(current_user, project_id)
    return [TaskResponse.model_validate(t) for t in tasks]


@router.post("/projects/{project_id}/tasks", response_model=TaskResponse)
async def create_task(
    project_id: UUID,
    task_data: TaskCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    task = await TaskService(db).create_task(current_user, project_id, task_data)
    return TaskResponse.model_validate(task)


@router.post("/projects/{project_id}/tasks/from-feature", response_model=TaskResponse)
async def add_feature_to_task(
    project_id: UUID,
    payload: PromoteFeatureRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Promote a feature to a task"""
    task = await TaskService(db).add_feature_to_task(
        current_user, project_id, payload.feature_id, payload.due_date, payload.assigned_to
    )
    return TaskResponse.model_validate(task)


@router.get("/tasks", response_model=List[TaskResponse])
async def list_all_tasks(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Tasks from every project the caller can see"""
    tasks = await TaskService(db).list_all_tasks(current_user)
    return [TaskResponse.model_validate(t) for t in tasks]


@router.get("/features/{feature_id}/tasks", response_model=List[TaskResponse])
async def list_feature_tasks(
    feature_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    tasks = await TaskService(db).list_feature_tasks(current_user, feature_id)
    return [TaskResponse.model_validate(t) for t in tasks]


@router.delete("/features/{feature_id}/tasks")
async def remove_feature_from_task(
    feature_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Remove the task promoted from a feature"""
    removed = await TaskService(db).remove_feature_from_task(current_user, feature_id)
    return {"success": True, "data": {"removed_tasks": removed}}


@router.post("/tasks/{task_id}/move", response_model=BoardResponse)
async def move_task(
    task_id: UUID,
    payload: TaskMoveRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Move a task to an index within a column and return the resulting board"""
    return await TaskService(db).move_task(current_user, task_id, payload.status, payload.index)


@router.put("/tasks/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: UUID,
    payload: TaskStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    task = await TaskService(db).update_task_status(current_user, task_id, payload.status)
    return TaskResponse.model_validate(task)


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    patch: TaskUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    task = await TaskService(db).update_task(current_user, task_id, patch)
    return TaskResponse.model_validate(task)


@router.put("/tasks/{task_id}/assignment", response_model=TaskResponse)
async def update_task_assignment(
    task_id: UUID,
    payload: TaskAssignmentUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    task = await TaskService(db).update_task_assignment(current_user, task_id, payload.assigned_to)
    return TaskResponse.model_validate(task)


@router.put("/tasks/{task_id}/notes", response_model=TaskResponse)
async def update_task_notes(
    task_id: UUID,
    payload: TaskNotesUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    task = await TaskService(db).update_task_notes(current_user, task_id, payload.notes)
    return TaskResponse.model_validate(task)


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await TaskService(db).delete_task(current_user, task_id)
    return {"success": True, "message": "Task deleted successfully"}
