"""
Project and project member models
"""
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Boolean, JSON, CheckConstraint
from sqlalchemy.orm import relationship
import uuid

from projectflow.core.database import Base
from projectflow.core.db_types import UUID, utcnow


PROJECT_STATUSES = ("draft", "active", "completed", "archived")
TOTAL_STEPS = 6


class Project(Base):
    __tablename__ = "projects"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), default="", nullable=False)
    description = Column(Text, default="", nullable=False)
    category = Column(String(100), nullable=True)
    platform = Column(String(100), nullable=True)
    tech_stack = Column(JSON, nullable=True)  # {"name": "..."}
    status = Column(String(20), default="draft", nullable=False)

    # Wizard progress
    current_step = Column(Integer, default=1, nullable=False)
    last_edited_step = Column(Integer, default=1, nullable=False)
    total_steps = Column(Integer, default=TOTAL_STEPS, nullable=False)
    questions_generated = Column(Boolean, default=False, nullable=False)
    questions_answered = Column(Boolean, default=False, nullable=False)
    can_proceed_from_context = Column(Boolean, default=False, nullable=False)
    prompts_generated = Column(Boolean, default=False, nullable=False)

    summary = Column(Text, nullable=True)
    summary_details = Column(JSON, nullable=True)  # Structured AI summary
    last_draft_save = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("current_step >= 1 AND current_step <= total_steps", name="current_step_range"),
    )

    # Relationships
    members = relationship(
        "ProjectMember",
        back_populates="project",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Project(id={self.id}, name={self.name})>"

    @property
    def members_with_role(self) -> dict:
        """Collaborator id -> role; the owner is implicit and never listed"""
        return {member.user_id: member.role for member in self.members}


class ProjectMember(Base):
    __tablename__ = "project_members"

    project_id = Column(UUID(as_uuid=True), ForeignKey('projects.id', ondelete='CASCADE'), primary_key=True)
    user_id = Column(String(255), primary_key=True, index=True)
    role = Column(String(20), nullable=False)
    added_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('owner', 'admin', 'member', 'viewer')", name="member_role"),
    )

    # Relationships
    project = relationship("Project", back_populates="members")

    def __repr__(self):
        return f"<ProjectMember(project_id={self.project_id}, user_id={self.user_id}, role={self.role})>"
