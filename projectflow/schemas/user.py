"""
User profile schemas
"""
from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime


class UserProfileUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    image_url: Optional[str] = None
    timezone: Optional[str] = None


class UserProfileResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    image_url: Optional[str] = None
    timezone: str
    created_at: datetime

    class Config:
        from_attributes = True
