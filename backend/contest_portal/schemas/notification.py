from typing import List
from datetime import datetime

from contest_portal.schemas.common import CamelModel, Pagination


class NotificationResponse(CamelModel):
    id: int
    type: str
    title: str
    content: str
    is_read: bool
    created_at: datetime


class NotificationPush(CamelModel):
    """Payload of the real-time `notification` event"""
    id: int
    type: str
    title: str
    content: str
    created_at: datetime


class NotificationListData(CamelModel):
    notifications: List[NotificationResponse]
    pagination: Pagination
    unread_count: int


class MarkAllReadData(CamelModel):
    updated: int
