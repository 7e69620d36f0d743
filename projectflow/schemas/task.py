"""
Task board schemas
"""
from pydantic import BaseModel, validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from projectflow.models.feature import FEATURE_PRIORITIES, FEATURE_EFFORTS, FEATURE_CATEGORIES
from projectflow.models.task import TASK_STATUSES
from projectflow.schemas.feature import _check_choice


def _check_status(v):
    if v is not None and v not in TASK_STATUSES:
        raise ValueError(f"Status must be one of {', '.join(TASK_STATUSES)}")
    return v


class PromoteFeatureRequest(BaseModel):
    feature_id: UUID
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None


class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = ""
    status: str = "todo"
    priority: Optional[str] = None
    effort: Optional[str] = None
    category: Optional[str] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None

    @validator('title')
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Task title cannot be empty')
        return v.strip()

    @validator('status')
    def validate_status(cls, v):
        return _check_status(v)

    @validator('priority')
    def validate_priority(cls, v):
        return _check_choice(v, FEATURE_PRIORITIES, 'Priority')

    @validator('effort')
    def validate_effort(cls, v):
        return _check_choice(v, FEATURE_EFFORTS, 'Effort')

    @validator('category')
    def validate_category(cls, v):
        return _check_choice(v, FEATURE_CATEGORIES, 'Category')


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    effort: Optional[str] = None
    category: Optional[str] = None
    due_date: Optional[datetime] = None

    @validator('title')
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Task title cannot be empty')
        return v.strip() if v else v

    @validator('priority')
    def validate_priority(cls, v):
        return _check_choice(v, FEATURE_PRIORITIES, 'Priority')

    @validator('effort')
    def validate_effort(cls, v):
        return _check_choice(v, FEATURE_EFFORTS, 'Effort')

    @validator('category')
    def validate_category(cls, v):
        return _check_choice(v, FEATURE_CATEGORIES, 'Category')


class TaskMoveRequest(BaseModel):
    status: str
    index: int

    @validator('status')
    def validate_status(cls, v):
        return _check_status(v)

    @validator('index')
    def validate_index(cls, v):
        if v < 0:
            raise ValueError('Index must be non-negative')
        return v


class TaskStatusUpdate(BaseModel):
    status: str

    @validator('status')
    def validate_status(cls, v):
        return _check_status(v)


class TaskAssignmentUpdate(BaseModel):
    assigned_to: Optional[str] = None


class TaskNotesUpdate(BaseModel):
    notes: str


class TaskResponse(BaseModel):
    id: UUID
    project_id: UUID
    feature_id: Optional[UUID] = None
    title: str
    description: str
    status: str
    position: int
    priority: Optional[str] = None
    effort: Optional[str] = None
    category: Optional[str] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BoardColumn(BaseModel):
    status: str
    tasks: List[TaskResponse]


class BoardResponse(BaseModel):
    project_id: UUID
    columns: List[BoardColumn]
