from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contest_portal.core.database import get_db
from contest_portal.models.user import User
from contest_portal.modules.auth.dependencies import get_current_user
from contest_portal.schemas.auth import UserResponse
from contest_portal.schemas.common import ApiResponse
from contest_portal.schemas.user import PasswordChange, ProfileUpdate
from contest_portal.services import user_service

router = APIRouter()


@router.get("/profile", response_model=ApiResponse[UserResponse])
async def get_profile(current_user: User = Depends(get_current_user)):
    return ApiResponse[UserResponse](data=UserResponse.model_validate(current_user))


@router.put("/profile", response_model=ApiResponse[UserResponse])
async def update_profile(
    profile: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update phone, real name, avatar or student ID"""
    user = await user_service.update_profile(db, current_user, profile)
    return ApiResponse[UserResponse](data=UserResponse.model_validate(user), message="Profile updated")


@router.put("/password", response_model=ApiResponse[None])
async def change_password(
    payload: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await user_service.change_password(db, current_user, payload)
    return ApiResponse[None](message="Password changed")
