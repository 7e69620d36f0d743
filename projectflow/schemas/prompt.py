"""
Generated prompt schemas
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from uuid import UUID


class PromptGenerateRequest(BaseModel):
    feature_id: Optional[UUID] = None


class PromptResponse(BaseModel):
    id: UUID
    project_id: UUID
    feature_id: Optional[UUID] = None
    content: str
    type: str
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class DocumentationResponse(BaseModel):
    project_id: UUID
    title: str
    tech_stack: Optional[str] = None
    content: str
    generated_at: datetime
