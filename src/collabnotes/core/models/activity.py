# Per-note audit trail
import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from .types import GUID, UTCDateTime, utc_now

if TYPE_CHECKING:
    from .note import Note


class ActivityAction(str, Enum):
    CREATED = "created"
    EDITED = "edited"
    SHARED = "shared"
    UNSHARED = "unshared"
    PERMISSION_CHANGED = "permission_changed"
    ARCHIVED = "archived"
    UNARCHIVED = "unarchived"
    TRASHED = "trashed"
    RESTORED = "restored"
    CATEGORY_CHANGED = "category_changed"


class NoteActivity(BaseModel):
    """
    One entry of a note's activity log.

    Rows are only ever inserted. ``position`` is the zero-based index in the
    log; the unique constraint rejects two writers appending at the same slot.
    """

    __tablename__ = "note_activities"

    note_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[str] = mapped_column(String(40), nullable=False)
    actor_id: Mapped[uuid.UUID] = mapped_column(GUID(), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), default=utc_now, nullable=False)
    meta: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)

    note: Mapped["Note"] = relationship("Note", back_populates="activities")

    __table_args__ = (
        UniqueConstraint("note_id", "position", name="uq_note_activities_note_position"),
    )

    def __repr__(self) -> str:
        return f"<NoteActivity(note_id={self.note_id}, position={self.position}, action={self.action})>"
