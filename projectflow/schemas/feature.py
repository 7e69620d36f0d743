"""
Feature schemas
"""
from pydantic import BaseModel, validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID

from projectflow.models.feature import FEATURE_PRIORITIES, FEATURE_EFFORTS, FEATURE_CATEGORIES


def _check_choice(value, choices, field):
    if value is not None and value not in choices:
        raise ValueError(f"{field} must be one of {', '.join(choices)}")
    return value


class FeatureCreate(BaseModel):
    title: str
    description: str = ""
    priority: str = "Medium"
    effort: str = "Medium"
    category: str = "Core"
    implementation_details: Optional[str] = None
    ai_prompt: Optional[str] = None

    @validator('title')
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Feature title cannot be empty')
        return v.strip()

    @validator('priority')
    def validate_priority(cls, v):
        return _check_choice(v, FEATURE_PRIORITIES, 'Priority')

    @validator('effort')
    def validate_effort(cls, v):
        return _check_choice(v, FEATURE_EFFORTS, 'Effort')

    @validator('category')
    def validate_category(cls, v):
        return _check_choice(v, FEATURE_CATEGORIES, 'Category')


class FeaturesBulkCreate(BaseModel):
    features: List[FeatureCreate]


class FeatureUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    effort: Optional[str] = None
    category: Optional[str] = None
    implementation_details: Optional[str] = None
    ai_prompt: Optional[str] = None

    @validator('title')
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Feature title cannot be empty')
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


class FeatureGenerateRequest(BaseModel):
    count: int = 1

    @validator('count')
    def validate_count(cls, v):
        if v < 1 or v > 10:
            raise ValueError('Count must be between 1 and 10')
        return v


class FeatureResponse(BaseModel):
    id: UUID
    project_id: UUID
    title: str
    description: str
    priority: str
    effort: str
    category: str
    implementation_details: Optional[str] = None
    ai_prompt: Optional[str] = None
    created_by: Optional[str] = None
    added_to_task: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
