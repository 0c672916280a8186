# Pull-based notification feed entries
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel
from .types import GUID, UTCDateTime


class NotificationType(str, Enum):
    SHARED = "shared"
    UNSHARED = "unshared"
    PERMISSION_CHANGED = "permission_changed"


class Notification(BaseModel):
    """
    Immutable once created.

    actor_id and note_id are plain references without foreign keys so the
    entry outlives the note or actor; readers fall back to placeholders.
    """

    __tablename__ = "notifications"

    recipient_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    actor_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    note_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    permission: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    read_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        Index("idx_notifications_recipient_created", "recipient_id", "created_at"),
        Index("idx_notifications_note_id", "note_id"),
    )

    def __repr__(self) -> str:
        return f"<Notification(recipient_id={self.recipient_id}, type={self.type})>"
