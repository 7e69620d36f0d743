"""
Chat schemas
"""
from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime
from uuid import UUID


class ChatMessageCreate(BaseModel):
    content: str
    user_name: Optional[str] = None
    user_image_url: Optional[str] = None

    @validator('content')
    def validate_content(cls, v):
        if not v.strip():
            raise ValueError('Message cannot be empty')
        if len(v) > 4000:
            raise ValueError('Message cannot exceed 4000 characters')
        return v.strip()


class ChatMessageResponse(BaseModel):
    id: UUID
    project_id: UUID
    user_id: str
    content: str
    timestamp: datetime
    user_name: Optional[str] = None
    user_image_url: Optional[str] = None

    class Config:
        from_attributes = True
