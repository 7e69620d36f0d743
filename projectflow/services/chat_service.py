"""
Project chat service
"""
import logging
import uuid
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from projectflow.config import settings
from projectflow.core.exceptions import InsufficientPermissionsError, ResourceNotFoundError, ValidationError
from projectflow.core.permissions import VIEWER, require_project_access, find_visible_project
from projectflow.core.security import CurrentUser
from projectflow.models.chat import ChatMessage

logger = logging.getLogger(__name__)


class ChatService:
    """Per-project timestamped message log"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def send_message(
        self,
        user: CurrentUser,
        project_id: uuid.UUID,
        content: str,
        user_name: Optional[str] = None,
        user_image_url: Optional[str] = None
    ) -> ChatMessage:
        await require_project_access(self.db, project_id, user.user_id, VIEWER)
        if not content or not content.strip():
            raise ValidationError("Message cannot be empty")

        message = ChatMessage(
            project_id=project_id,
            user_id=user.user_id,
            content=content.strip(),
            user_name=user_name or user.name,
            user_image_url=user_image_url or user.image_url,
        )
        self.db.add(message)
        await self.db.commit()
        return message

    async def list_messages(self, user: CurrentUser, project_id: uuid.UUID,
                            limit: Optional[int] = None) -> List[ChatMessage]:
        """The newest ``limit`` messages, oldest first"""
        project = await find_visible_project(self.db, project_id, user.user_id)
        if project is None:
            return []

        result = await self.db.execute(
            select(ChatMessage)
            .where(ChatMessage.project_id == project.id)
            .order_by(ChatMessage.timestamp.desc())
            .limit(limit or settings.chat_page_size)
        )
        return list(reversed(result.scalars().all()))

    async def delete_message(self, user: CurrentUser, message_id: uuid.UUID) -> None:
        message = await self.db.get(ChatMessage, message_id)
        if not message:
            raise ResourceNotFoundError("Message")
        if message.user_id != user.user_id:
            raise InsufficientPermissionsError("You can only delete your own messages")

        await self.db.delete(message)
        await self.db.commit()
        logger.info("Chat message deleted", extra={"message_id": str(message_id)})
