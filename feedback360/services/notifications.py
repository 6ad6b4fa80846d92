from typing import List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.errors import NotFoundError
from feedback360.models.notification import Notification


async def create_notification(
    db: AsyncSession,
    user_id: str,
    title: str,
    message: str,
    type: str = "system",
    priority: str = "normal",
    action_url: Optional[str] = None,
    action_label: Optional[str] = None,
    commit: bool = True,
) -> Notification:
    """Create a notification. Pass commit=False to stage it in a caller's unit of work."""
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        priority=priority,
        action_url=action_url,
        action_label=action_label,
        is_read=False,
    )
    db.add(notification)
    if commit:
        await db.commit()
        await db.refresh(notification)
    return notification


async def list_notifications(db: AsyncSession, user_id: str, limit: int = 50) -> List[Notification]:
    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def unread_count(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id, Notification.is_read.is_(False)
        )
    )
    return result.scalar_one()


async def mark_read(db: AsyncSession, notification_id: str, user_id: str) -> Notification:
    notification = await db.get(Notification, notification_id)
    # other users' notifications are reported as missing
    if not notification or notification.user_id != user_id:
        raise NotFoundError("Notification not found")
    notification.is_read = True
    await db.commit()
    await db.refresh(notification)
    return notification


async def mark_all_read(db: AsyncSession, user_id: str) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    await db.commit()
    return result.rowcount
