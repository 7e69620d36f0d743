"""
Task model
"""
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Index
import uuid

from projectflow.core.database import Base
from projectflow.core.db_types import UUID, utcnow


TASK_STATUSES = ("todo", "in_progress", "completed", "blocked")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    # Tasks created by hand have no feature
    feature_id = Column(UUID(as_uuid=True), ForeignKey('features.id', ondelete='CASCADE'), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="", nullable=False)
    status = Column(String(20), default="todo", nullable=False)
    position = Column(Integer, nullable=False)
    priority = Column(String(20), nullable=True)
    effort = Column(String(20), nullable=True)
    category = Column(String(20), nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    assigned_to = Column(String(255), nullable=True, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_tasks_project_status_position", "project_id", "status", "position"),
    )

    def __repr__(self):
        return f"<Task(id={self.id}, status={self.status}, position={self.position})>"
