"""
Notification feed and best-effort dispatch.

Sharing operations hand their NotificationIntents to NotificationDispatcher
after the note write has committed. A failed append is logged and counted,
never raised: the sharing change already happened and must be reported as
a success.
"""

from typing import Iterable, Optional
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..exceptions import NotFoundError
from ..logging import get_logger
from ..models.notification import Notification, NotificationType
from ..models.user import User
from ..repositories.note_repository import NoteRepository
from ..repositories.notification_repository import NotificationRepository
from ..repositories.user_repository import UserRepository
from ..schemas.notifications import NotificationActor, NotificationListResponse, NotificationResponse
from ..sharing import NotificationIntent
from .interfaces import INotificationService

logger = get_logger(__name__)

UNKNOWN_ACTOR = "Someone"
MISSING_NOTE_TITLE = "(deleted note)"


def describe(notification_type: str, who: str, title: str, permission: Optional[str] = None) -> str:
    """Human readable one-liner for a feed entry."""
    if notification_type == NotificationType.SHARED.value:
        return f"{who} shared a note with you • {title}"
    if notification_type == NotificationType.UNSHARED.value:
        return f"{who} unshared a note with you • {title}"
    if notification_type == NotificationType.PERMISSION_CHANGED.value:
        return f"{who} changed your permission to {permission or ''} • {title}"
    return f"{who} updated a note • {title}"


class DispatchReport(BaseModel):
    delivered: int = 0
    failed: int = 0


class NotificationDispatcher:
    """Appends notifications without ever failing the caller."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.notification_repo = NotificationRepository(session)

    async def dispatch(self, intents: Iterable[NotificationIntent]) -> DispatchReport:
        report = DispatchReport()
        for intent in intents:
            try:
                await self.notification_repo.create_notification(
                    {
                        "recipient_id": intent.recipient_id,
                        "actor_id": intent.actor_id,
                        "note_id": intent.note_id,
                        "type": intent.type.value,
                        "permission": intent.permission.value if intent.permission else None,
                    }
                )
                report.delivered += 1
            except Exception:
                report.failed += 1
                logger.exception(
                    "Notification dispatch failed",
                    extra={
                        "recipient_id": str(intent.recipient_id),
                        "note_id": str(intent.note_id),
                        "notification_type": intent.type.value,
                    },
                )
                await self._reset_session()
        if report.failed:
            logger.warning("Some notifications were dropped", extra=report.model_dump())
        return report

    async def _reset_session(self) -> None:
        try:
            await self.session.rollback()
        except Exception:
            logger.exception("Rollback after failed notification dispatch failed")


class NotificationService(INotificationService):
    """Read side of the feed."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.notification_repo = NotificationRepository(session)
        self.user_repo = UserRepository(session)
        self.note_repo = NoteRepository(session)
        self.settings = get_settings()

    async def list_notifications(self, recipient_id: UUID) -> NotificationListResponse:
        """
        Newest entries first, enriched with the actor and the note title as
        they are now. Deleted actors or notes degrade to placeholders.
        """
        rows = await self.notification_repo.list_for_recipient(
            recipient_id, limit=self.settings.notification_feed_limit
        )
        actors = await self.user_repo.get_many(row.actor_id for row in rows)
        titles = await self.note_repo.titles_by_ids(row.note_id for row in rows)
        return NotificationListResponse(
            notifications=[self._enrich(row, actors.get(row.actor_id), titles.get(row.note_id)) for row in rows]
        )

    def _enrich(
        self, row: Notification, actor: Optional[User], title: Optional[str]
    ) -> NotificationResponse:
        who = (actor.name or actor.email) if actor else UNKNOWN_ACTOR
        note_title = title if title is not None else MISSING_NOTE_TITLE
        return NotificationResponse(
            id=row.id,
            type=row.type,
            permission=row.permission,
            note_id=row.note_id,
            note_title=note_title,
            actor=NotificationActor(
                id=row.actor_id,
                name=actor.name if actor else None,
                email=actor.email if actor else None,
            ),
            message=describe(row.type, who or UNKNOWN_ACTOR, note_title, row.permission),
            read_at=row.read_at,
            created_at=row.created_at,
        )

    async def delete_notification(self, recipient_id: UUID, notification_id: UUID) -> None:
        if not await self.notification_repo.delete_for_recipient(notification_id, recipient_id):
            raise NotFoundError("Notification not found")

    async def clear_notifications(self, recipient_id: UUID) -> int:
        removed = await self.notification_repo.clear_for_recipient(recipient_id)
        logger.info("Notifications cleared", extra={"user_id": str(recipient_id), "removed": removed})
        return removed
