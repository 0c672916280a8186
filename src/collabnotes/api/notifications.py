"""Notification feed endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.common import MessageResponse
from ..core.schemas.notifications import NotificationListResponse
from ..core.services import NotificationService
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Most recent notifications, newest first."""
    notification_service = NotificationService(session)
    return await notification_service.list_notifications(current_user_id)


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(
    notification_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    notification_service = NotificationService(session)
    await notification_service.delete_notification(current_user_id, notification_id)
    return MessageResponse(message="Notification deleted")


@router.delete("", response_model=MessageResponse)
async def clear_notifications(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    notification_service = NotificationService(session)
    await notification_service.clear_notifications(current_user_id)
    return MessageResponse(message="Notifications cleared")
