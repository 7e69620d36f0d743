"""
Project chat endpoints
"""
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from projectflow.core.database import get_db
from projectflow.core.deps import get_current_user
from projectflow.core.security import CurrentUser
from projectflow.schemas.chat import ChatMessageCreate, ChatMessageResponse
from projectflow.services.chat_service import ChatService

router = APIRouter()


@router.get("/projects/{project_id}/messages", response_model=List[ChatMessageResponse])
async def list_messages(
    project_id: UUID,
    limit: Optional[int] = Query(None, ge=1, le=200),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    messages = await ChatService(db).list_messages(current_user, project_id, limit)
    return [ChatMessageResponse.model_validate(m) for m in messages]


@router.post("/projects/{project_id}/messages", response_model=ChatMessageResponse)
async def send_message(
    project_id: UUID,
    payload: ChatMessageCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    message = await ChatService(db).send_message(
        current_user, project_id, payload.content, payload.user_name, payload.user_image_url
    )
    return ChatMessageResponse.model_validate(message)


@router.delete("/messages/{message_id}")
async def delete_message(
    message_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await ChatService(db).delete_message(current_user, message_id)
    return {"success": True, "message": "Message deleted successfully"}
