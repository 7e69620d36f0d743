"""
Workspace-wide endpoints
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectflow.core.database import get_db
from projectflow.core.deps import get_current_user, get_email_service
from projectflow.core.security import CurrentUser
from projectflow.schemas.member import DirectoryMemberResponse
from projectflow.services.email_service import EmailService
from projectflow.services.member_service import MemberService

router = APIRouter()


@router.get("/members", response_model=List[DirectoryMemberResponse])
async def list_workspace_members(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
):
    """Everyone the caller shares a project with, and their role in each of those projects"""
    return await MemberService(db, email_service).list_directory(current_user)
