"""
User profile model
"""
from sqlalchemy import Column, String, DateTime

from projectflow.core.database import Base
from projectflow.core.db_types import utcnow


class UserProfile(Base):
    __tablename__ = "user_profiles"

    # Subject issued by the identity provider
    user_id = Column(String(255), primary_key=True)
    email = Column(String(255), unique=True, nullable=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    company = Column(String(255), nullable=True)
    image_url = Column(String(500), nullable=True)
    timezone = Column(String(64), default="UTC", nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<UserProfile(user_id={self.user_id}, email={self.email})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def display_name(self) -> str:
        return self.full_name or "A user"
