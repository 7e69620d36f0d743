"""
User profile endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectflow.core.database import get_db
from projectflow.core.deps import get_current_user
from projectflow.core.security import CurrentUser
from projectflow.schemas.user import UserProfileUpdate, UserProfileResponse
from projectflow.services.user_service import UserService

router = APIRouter()


@router.get("/me", response_model=UserProfileResponse)
async def get_my_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's profile"""
    profile = await UserService(db).get_profile(current_user)
    return UserProfileResponse.model_validate(profile)


@router.post("/me", response_model=UserProfileResponse)
async def ensure_my_profile(
    profile_data: UserProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create the caller's profile on first sign-in"""
    profile = await UserService(db).ensure_profile(
        current_user,
        email=profile_data.email,
        first_name=profile_data.first_name,
        last_name=profile_data.last_name,
        image_url=profile_data.image_url,
        company=profile_data.company,
        timezone=profile_data.timezone,
    )
    return UserProfileResponse.model_validate(profile)


@router.put("/me", response_model=UserProfileResponse)
async def update_my_profile(
    profile_data: UserProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update the caller's profile"""
    profile = await UserService(db).update_profile(current_user, profile_data)
    return UserProfileResponse.model_validate(profile)
