"""
Project member endpoints
"""
from typing import List
from uuid import UUID
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectflow.core.database import get_db
from projectflow.core.deps import get_current_user, get_email_service
from projectflow.core.security import CurrentUser
from projectflow.schemas.member import MemberAdd, MemberRoleUpdate, MemberResponse
from projectflow.services.email_service import EmailService
from projectflow.services.member_service import MemberService

router = APIRouter()


@router.get("/{project_id}/members", response_model=List[MemberResponse])
async def list_members(
    project_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
):
    return await MemberService(db, email_service).list_members(current_user, project_id)


@router.post("/{project_id}/members", response_model=MemberResponse)
async def add_member(
    project_id: UUID,
    payload: MemberAdd,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
):
    """Add a collaborator by email; the invitation is sent in the background"""
    member = await MemberService(db, email_service).add_member(
        current_user, project_id, payload.email, payload.role, background_tasks
    )
    return MemberResponse(user_id=member.user_id, role=member.role)


@router.put("/{project_id}/members/{member_user_id}", response_model=MemberResponse)
async def update_member_role(
    project_id: UUID,
    member_user_id: str,
    payload: MemberRoleUpdate,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
):
    member = await MemberService(db, email_service).update_member_role(
        current_user, project_id, member_user_id, payload.role, background_tasks
    )
    return MemberResponse(user_id=member.user_id, role=member.role)


@router.delete("/{project_id}/members/{member_user_id}")
async def remove_member(
    project_id: UUID,
    member_user_id: str,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
):
    await MemberService(db, email_service).remove_member(
        current_user, project_id, member_user_id, background_tasks
    )
    return {"success": True, "message": "Member removed successfully"}
