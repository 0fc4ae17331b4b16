"""
Admin user management: listing and role assignment.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from contest_portal.core.database import get_db
from contest_portal.models.user import User, UserRole
from contest_portal.modules.auth.dependencies import get_current_admin
from contest_portal.schemas.admin import AdminUserListData, RoleUpdate
from contest_portal.schemas.auth import UserResponse
from contest_portal.schemas.common import ApiResponse, PageParams, Pagination
from contest_portal.services import user_service
from contest_portal.utils.pagination import page_params

router = APIRouter()


@router.get("", response_model=ApiResponse[AdminUserListData])
async def list_users(
    params: PageParams = Depends(page_params),
    search: Optional[str] = Query(None, description="Username, email, real name or student ID"),
    role: Optional[UserRole] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    users, total = await user_service.list_users(db, params, search=search, role=role)
    return ApiResponse[AdminUserListData](data=AdminUserListData(
        users=[UserResponse.model_validate(u) for u in users],
        pagination=Pagination.build(params.page, params.limit, total),
    ))


@router.put("/{user_id}/role", response_model=ApiResponse[UserResponse])
async def update_user_role(
    user_id: int,
    payload: RoleUpdate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Change a user's role.

    Admins may assign user/admin to anyone but a super admin; super admins
    may assign any role but cannot demote themselves.
    """
    user = await user_service.update_user_role(db, current_user, user_id, payload.role)
    return ApiResponse[UserResponse](data=UserResponse.model_validate(user), message="Role updated")
