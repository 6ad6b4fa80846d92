from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from feedback360.core.auth import get_current_user
from feedback360.database import get_db
from feedback360.models.profile import Profile
from feedback360.schemas.common import DataResponse, SuccessResponse
from feedback360.schemas.notification import MarkReadRequest, NotificationList, NotificationResponse
from feedback360.services import notifications as notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=DataResponse[NotificationList])
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": {
        "notifications": await notification_service.list_notifications(db, current_user.id, limit),
        "unread_count": await notification_service.unread_count(db, current_user.id),
    }}


@router.post("/mark-read", response_model=DataResponse[NotificationResponse])
async def mark_read(
    payload: MarkReadRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return {"data": await notification_service.mark_read(db, payload.notification_id, current_user.id)}


@router.post("/mark-all-read", response_model=SuccessResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    updated = await notification_service.mark_all_read(db, current_user.id)
    return SuccessResponse(message=f"{updated} notifications marked as read")
