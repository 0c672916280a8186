# Note sharing between users
import uuid
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from .types import GUID

if TYPE_CHECKING:
    from .note import Note
    from .user import User


class SharePermission(str, Enum):
    """Permission granted to a collaborator."""

    VIEWER = "viewer"
    EDITOR = "editor"


class NoteShare(BaseModel):
    """One collaborator entry on a note. The owner never has a row here."""

    __tablename__ = "note_shares"

    note_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    permission: Mapped[str] = mapped_column(String(20), default=SharePermission.VIEWER.value, nullable=False)

    note: Mapped["Note"] = relationship("Note", back_populates="shares")
    user: Mapped["User"] = relationship("User", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("note_id", "user_id", name="uq_note_shares_note_user"),
        Index("idx_note_shares_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<NoteShare(note_id={self.note_id}, user_id={self.user_id}, permission={self.permission})>"
