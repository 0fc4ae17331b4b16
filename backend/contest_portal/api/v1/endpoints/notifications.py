from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from contest_portal.core.database import get_db
from contest_portal.models.user import User
from contest_portal.modules.auth.dependencies import get_current_user
from contest_portal.schemas.common import ApiResponse, PageParams, Pagination
from contest_portal.schemas.notification import (
    MarkAllReadData,
    NotificationListData,
    NotificationResponse,
)
from contest_portal.services import notification_service
from contest_portal.utils.pagination import page_params

router = APIRouter()


@router.get("", response_model=ApiResponse[NotificationListData])
async def list_notifications(
    params: PageParams = Depends(page_params),
    is_read: Optional[bool] = Query(None, alias="isRead"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    notifications, total, unread = await notification_service.list_notifications(
        db, current_user, params, is_read
    )
    return ApiResponse[NotificationListData](data=NotificationListData(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        pagination=Pagination.build(params.page, params.limit, total),
        unread_count=unread,
    ))


@router.put("/read-all", response_model=ApiResponse[MarkAllReadData])
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    updated = await notification_service.mark_all_read(db, current_user)
    return ApiResponse[MarkAllReadData](data=MarkAllReadData(updated=updated), message="All marked as read")


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    notification = await notification_service.mark_read(db, notification_id, current_user)
    return ApiResponse[NotificationResponse](data=NotificationResponse.model_validate(notification))
