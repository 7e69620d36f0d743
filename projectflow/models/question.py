"""
Project question and answer models
"""
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Boolean, JSON, UniqueConstraint
import uuid

from projectflow.core.database import Base
from projectflow.core.db_types import UUID, utcnow


QUESTION_SECTIONS = ("general", "technical", "business", "user_experience")
QUESTION_INPUT_TYPES = ("text", "textarea", "select", "multiselect", "radio", "checkbox")


class ProjectQuestion(Base):
    __tablename__ = "project_questions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True)
    section = Column(String(32), default="general", nullable=False)
    question_text = Column(Text, nullable=False)
    placeholder_text = Column(String(500), nullable=True)
    input_type = Column(String(32), default="textarea", nullable=False)
    options = Column(JSON, nullable=True)
    order_index = Column(Integer, nullable=False)
    is_required = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<ProjectQuestion(id={self.id}, order_index={self.order_index})>"


class ProjectAnswer(Base):
    __tablename__ = "project_answers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True)
    question_id = Column(UUID(as_uuid=True), ForeignKey('project_questions.id', ondelete='CASCADE'), nullable=False)
    answer_text = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # One answer per question within a project
    __table_args__ = (
        UniqueConstraint('project_id', 'question_id', name='unique_project_question_answer'),
    )

    def __repr__(self):
        return f"<ProjectAnswer(question_id={self.question_id})>"
