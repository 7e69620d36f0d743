"""
Generated implementation prompt model
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
import uuid

from projectflow.core.database import Base
from projectflow.core.db_types import UUID, utcnow


class Prompt(Base):
    __tablename__ = "prompts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True)
    feature_id = Column(UUID(as_uuid=True), ForeignKey('features.id', ondelete='CASCADE'), nullable=True, index=True)
    content = Column(Text, nullable=False)
    type = Column(String(20), nullable=False)  # project or feature
    user_id = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Prompt(id={self.id}, type={self.type})>"
