"""Notification repository for database operations."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.notification import Notification


class NotificationRepository:
    """Repository for notification database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_notification(self, notification_data: dict) -> Notification:
        """Append one entry to a recipient's feed."""
        notification = Notification(**notification_data)
        self.session.add(notification)
        await self.session.commit()
        return notification

    async def list_for_recipient(self, recipient_id: UUID, limit: int = 50) -> List[Notification]:
        """Newest first by creation time."""
        stmt = (
            select(Notification)
            .where(Notification.recipient_id == recipient_id)
            .order_by(desc(Notification.created_at))
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def delete_for_recipient(self, notification_id: UUID, recipient_id: UUID) -> bool:
        """Delete one entry if it belongs to recipient."""
        result = await self.session.execute(
            delete(Notification)
            .where(Notification.id == notification_id, Notification.recipient_id == recipient_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount == 1

    async def clear_for_recipient(self, recipient_id: UUID) -> int:
        """Delete the whole feed. Returns the number of entries removed."""
        result = await self.session.execute(
            delete(Notification)
            .where(Notification.recipient_id == recipient_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return result.rowcount or 0
