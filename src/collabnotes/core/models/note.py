# Note model for user content
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from .types import GUID, UTCDateTime

if TYPE_CHECKING:
    from .activity import NoteActivity
    from .share import NoteShare
    from .user import User

DEFAULT_CATEGORY = "personal"


class Note(BaseModel):
    """Note owned by one user and optionally shared with others."""

    __tablename__ = "notes"

    # owner never changes after creation
    owner_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    body: Mapped[str] = mapped_column(Text, default="", nullable=False)
    category: Mapped[str] = mapped_column(String(40), default=DEFAULT_CATEGORY, nullable=False)

    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_trashed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    last_edited_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(GUID(), nullable=True)
    last_edited_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # bumped by every mutation, used for conditional writes
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    owner: Mapped["User"] = relationship("User", lazy="selectin")

    shares: Mapped[List["NoteShare"]] = relationship(
        "NoteShare",
        back_populates="note",
        cascade="all, delete-orphan",
        lazy="selectin",
        doc="Collaborators and their permission",
    )

    activities: Mapped[List["NoteActivity"]] = relationship(
        "NoteActivity",
        back_populates="note",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="NoteActivity.position",
        doc="Append-only audit trail",
    )

    __table_args__ = (
        CheckConstraint("length(title) <= 200", name="ck_notes_title_len"),
        CheckConstraint("length(body) <= 10000", name="ck_notes_body_len"),
        CheckConstraint("NOT (is_archived AND is_trashed)", name="ck_notes_archive_xor_trash"),
        Index("idx_notes_owner_id", "owner_id"),
        Index("idx_notes_owner_state", "owner_id", "is_archived", "is_trashed"),
        Index("idx_notes_category", "category"),
    )

    def __repr__(self) -> str:
        truncated = self.title if len(self.title) <= 30 else (self.title[:30] + "...")
        return f"<Note(title='{truncated}', owner_id={self.owner_id})>"
