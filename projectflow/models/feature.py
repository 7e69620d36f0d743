"""
Feature model
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Boolean
import uuid

from projectflow.core.database import Base
from projectflow.core.db_types import UUID, utcnow


FEATURE_PRIORITIES = ("Low", "Medium", "High", "Critical")
FEATURE_EFFORTS = ("Small", "Medium", "Large", "XL")
FEATURE_CATEGORIES = ("Core", "Enhancement", "Integration", "UI/UX", "Performance", "Security")


class Feature(Base):
    __tablename__ = "features"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    priority = Column(String(20), default="Medium", nullable=False)
    effort = Column(String(20), default="Medium", nullable=False)
    category = Column(String(20), default="Core", nullable=False)
    implementation_details = Column(Text, nullable=True)
    ai_prompt = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True)
    added_to_task = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Feature(id={self.id}, title={self.title})>"
