"""
Chat message model
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index
import uuid

from projectflow.core.database import Base
from projectflow.core.db_types import UUID, utcnow


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    # Denormalized sender details for display
    user_name = Column(String(255), nullable=True)
    user_image_url = Column(String(500), nullable=True)

    __table_args__ = (
        Index("ix_chat_messages_project_timestamp", "project_id", "timestamp"),
    )

    def __repr__(self):
        return f"<ChatMessage(id={self.id}, project_id={self.project_id})>"
