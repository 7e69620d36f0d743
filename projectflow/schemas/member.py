"""
Project collaboration schemas
"""
from pydantic import BaseModel, EmailStr, validator
from typing import List, Optional
from uuid import UUID

from projectflow.core.permissions import MEMBER_ROLES


class MemberAdd(BaseModel):
    email: EmailStr
    role: str = "member"

    @validator('role')
    def validate_role(cls, v):
        if v not in MEMBER_ROLES:
            raise ValueError(f"Role must be one of {', '.join(MEMBER_ROLES)}")
        return v


class MemberRoleUpdate(BaseModel):
    role: str

    @validator('role')
    def validate_role(cls, v):
        if v not in MEMBER_ROLES:
            raise ValueError(f"Role must be one of {', '.join(MEMBER_ROLES)}")
        return v


class MemberResponse(BaseModel):
    user_id: str
    role: str
    is_owner: bool = False
    email: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None


class MemberProjectRole(BaseModel):
    project_id: UUID
    project_name: str
    role: str


class DirectoryMemberResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None
    projects: List[MemberProjectRole] = []
