"""
Notification Service

notify() persists and commits the row, then hands the real-time push to a
background task. Workflows commit their own write first and go through
dispatch(), so neither a failed insert nor a failed push reaches the caller.
"""

import asyncio
from typing import Any, Dict, Optional, Set, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from contest_portal.core.exceptions import AuthorizationError, NotificationNotFoundError
from contest_portal.core.logging_config import logger
from contest_portal.models.notification import Notification, NotificationType
from contest_portal.models.user import User
from contest_portal.schemas.common import PageParams
from contest_portal.schemas.notification import NotificationPush
from contest_portal.services.notification_hub import notification_hub
from contest_portal.utils.pagination import paginate

NOTIFICATION_EVENT = "notification"

# Strong references so pending pushes are not garbage collected
_pending_pushes: Set[asyncio.Task] = set()


async def notify(
    db: AsyncSession,
    user_id: int,
    type: NotificationType,
    title: str,
    content: str,
) -> Notification:
    """Persist a notification, commit, then push it to the user's channel"""
    notification = Notification(
        user_id=user_id,
        type=type.value if isinstance(type, NotificationType) else type,
        title=title,
        content=content,
        is_read=False,
    )
    db.add(notification)
    await db.commit()
    await db.refresh(notification)

    payload = NotificationPush.model_validate(notification).model_dump(mode="json", by_alias=True)
    schedule_push(user_id, payload)
    return notification


async def dispatch(
    db: AsyncSession,
    user_id: int,
    type: NotificationType,
    title: str,
    content: str,
) -> Optional[Notification]:
    """
    notify() for a workflow whose own write is already committed.

    A failure is logged and rolled back; the caller's committed state stays.
    """
    try:
        return await notify(db, user_id, type, title, content)
    except Exception as e:
        await db.rollback()
        logger.log_error_with_context(
            e,
            context="notification_dispatch",
            user_id=user_id,
            notification_type=getattr(type, "value", type),
        )
        return None


def schedule_push(user_id: int, payload: Dict[str, Any]) -> Optional[asyncio.Task]:
    """Dispatch the push without waiting for it"""
    if not notification_hub.is_online(user_id):
        logger.debug(f"User {user_id} has no open notification socket, push skipped")
        return None

    try:
        task = asyncio.get_running_loop().create_task(_push(user_id, payload))
    except RuntimeError as e:
        logger.log_error_with_context(e, context="notification_push", user_id=user_id)
        return None

    _pending_pushes.add(task)
    task.add_done_callback(_pending_pushes.discard)
    return task


async def _push(user_id: int, payload: Dict[str, Any]) -> None:
    try:
        delivered = await notification_hub.send_to_user(user_id, NOTIFICATION_EVENT, payload)
        logger.debug(
            f"Notification {payload.get('id')} pushed to {delivered} socket(s) of user {user_id}"
        )
    except Exception as e:
        logger.log_error_with_context(
            e,
            context="notification_push",
            user_id=user_id,
            notification_id=payload.get("id"),
        )


async def list_notifications(
    db: AsyncSession,
    user: User,
    params: PageParams,
    is_read: Optional[bool] = None,
) -> Tuple[list, int, int]:
    """Return (page items, total, unread count) for one user"""
    query = select(Notification).where(Notification.user_id == user.id)
    if is_read is not None:
        query = query.where(Notification.is_read == is_read)
    query = query.order_by(Notification.created_at.desc(), Notification.id.desc())

    items, total = await paginate(db, query, params)

    unread = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user.id,
            Notification.is_read.is_(False),
        )
    )
    return items, total, unread.scalar() or 0


async def mark_read(db: AsyncSession, notification_id: int, user: User) -> Notification:
    """Mark one notification read; repeating the call is harmless"""
    result = await db.execute(select(Notification).where(Notification.id == notification_id))
    notification = result.scalar_one_or_none()

    if not notification:
        raise NotificationNotFoundError(notification_id)
    if notification.user_id != user.id:
        raise AuthorizationError("You can only update your own notifications")

    if not notification.is_read:
        notification.is_read = True
        await db.commit()

    return notification


async def mark_all_read(db: AsyncSession, user: User) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user.id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    await db.commit()
    return result.rowcount or 0
