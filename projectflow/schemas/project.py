"""
Project schemas
"""
from pydantic import BaseModel, validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID

from projectflow.models.project import PROJECT_STATUSES


class ProjectNameUpdate(BaseModel):
    name: str

    @validator('name')
    def validate_name(cls, v):
        if len(v.strip()) > 255:
            raise ValueError('Project name cannot exceed 255 characters')
        return v.strip()


class ProjectDescriptionUpdate(BaseModel):
    description: str
    tech_stack: Optional[str] = None

    @validator('description')
    def validate_description(cls, v):
        if len(v) > 5000:
            raise ValueError('Description cannot exceed 5000 characters')
        return v.strip()


class ProjectStepUpdate(BaseModel):
    current_step: int


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    platform: Optional[str] = None
    tech_stack: Optional[Dict[str, Any]] = None

    @validator('name')
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Project name cannot be empty')
        return v.strip() if v else v


class ProjectResponse(BaseModel):
    id: UUID
    owner_id: str
    name: str
    description: str
    category: Optional[str] = None
    platform: Optional[str] = None
    tech_stack: Optional[Dict[str, Any]] = None
    status: str
    current_step: int
    last_edited_step: int
    total_steps: int
    questions_generated: bool
    questions_answered: bool
    can_proceed_from_context: bool
    prompts_generated: bool
    summary: Optional[str] = None
    summary_details: Optional[Dict[str, Any]] = None
    last_draft_save: Optional[datetime] = None
    members_with_role: Dict[str, str] = {}
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @validator('status')
    def validate_status(cls, v):
        if v not in PROJECT_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(PROJECT_STATUSES)}")
        return v


class ProjectListResponse(BaseModel):
    projects: List[ProjectResponse]
