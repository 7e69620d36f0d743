"""
User profile service
"""
import logging
from typing import Dict, Iterable, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from projectflow.core.exceptions import ResourceNotFoundError, ValidationError
from projectflow.core.security import CurrentUser
from projectflow.models.user import UserProfile
from projectflow.schemas.user import UserProfileUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Profiles resolve e-mail addresses to identity-provider user ids"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> Optional[UserProfile]:
        result = await self.db.execute(
            select(UserProfile).where(func.lower(UserProfile.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def ensure_profile(
        self,
        user: CurrentUser,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        image_url: Optional[str] = None,
        company: Optional[str] = None,
        timezone: Optional[str] = None
    ) -> UserProfile:
        """Create the caller's profile on first sign-in; an existing one is returned untouched"""
        profile = await self.db.get(UserProfile, user.user_id)
        if profile:
            return profile

        email = email or user.email
        if email:
            taken = await self.get_by_email(email)
            if taken:
                raise ValidationError("Email is already registered to another user")

        if first_name is None and last_name is None and user.name:
            first_name, _, last_name = user.name.partition(" ")

        profile = UserProfile(
            user_id=user.user_id,
            email=email.strip().lower() if email else None,
            first_name=first_name,
            last_name=last_name or None,
            image_url=image_url or user.image_url,
            company=company,
            timezone=timezone or "UTC",
        )
        self.db.add(profile)
        await self.db.commit()

        logger.info("User profile created", extra={"user_id": user.user_id})
        return profile

    async def get_profile(self, user: CurrentUser) -> UserProfile:
        profile = await self.db.get(UserProfile, user.user_id)
        if not profile:
            raise ResourceNotFoundError("User profile")
        return profile

    async def update_profile(self, user: CurrentUser, patch: UserProfileUpdate) -> UserProfile:
        profile = await self.get_profile(user)
        changes = patch.model_dump(exclude_unset=True)

        if changes.get("email"):
            email = changes["email"].strip().lower()
            existing = await self.get_by_email(email)
            if existing and existing.user_id != user.user_id:
                raise ValidationError("Email is already registered to another user")
            changes["email"] = email

        for field, value in changes.items():
            setattr(profile, field, value)

        await self.db.commit()
        return profile

    async def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        result = await self.db.execute(select(UserProfile).where(UserProfile.user_id.in_(ids)))
        return {profile.user_id: profile for profile in result.scalars().all()}
