"""
Per-note role resolution.

Everything that asks "what may this user do to this note" goes through
resolve_role. Callers that fail the view check must report the note as
missing, so foreign notes are indistinguishable from absent ones.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .exceptions import AuthorizationError, NotFoundError
from .models.share import SharePermission

NOTE_NOT_FOUND = "Note not found"


class NoteRole(str, Enum):
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"


_ROLE_BY_PERMISSION = {
    SharePermission.EDITOR: NoteRole.EDITOR,
    SharePermission.VIEWER: NoteRole.VIEWER,
}


class ShareEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID
    permission: SharePermission


class NoteSnapshot(BaseModel):
    """Immutable view of a note used by the pure transforms."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str = ""
    body: str = ""
    category: str = "personal"
    is_archived: bool = False
    is_trashed: bool = False
    last_edited_by_id: Optional[uuid.UUID] = None
    last_edited_at: Optional[datetime] = None
    version: int = 1
    shared_with: Tuple[ShareEntry, ...] = ()
    activity_count: int = 0

    @classmethod
    def from_note(cls, note: Any) -> "NoteSnapshot":
        """Build from a loaded ORM note (shares and activities eager-loaded)."""
        return cls(
            id=note.id,
            owner_id=note.owner_id,
            title=note.title,
            body=note.body,
            category=note.category,
            is_archived=note.is_archived,
            is_trashed=note.is_trashed,
            last_edited_by_id=note.last_edited_by_id,
            last_edited_at=note.last_edited_at,
            version=note.version,
            shared_with=tuple(
                ShareEntry(user_id=share.user_id, permission=SharePermission(share.permission))
                for share in note.shares
            ),
            activity_count=len(note.activities),
        )

    def share_for(self, user_id: uuid.UUID) -> Optional[ShareEntry]:
        for entry in self.shared_with:
            if entry.user_id == user_id:
                return entry
        return None


class Capabilities(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_view: bool
    can_edit: bool
    can_manage: bool


def resolve_role(note: NoteSnapshot, user_id: uuid.UUID) -> Optional[NoteRole]:
    """Owner wins over any share entry; no entry means no role."""
    if note.owner_id == user_id:
        return NoteRole.OWNER
    entry = note.share_for(user_id)
    if entry is None:
        return None
    return _ROLE_BY_PERMISSION[entry.permission]


def can_view(role: Optional[NoteRole]) -> bool:
    return role is not None


def can_edit(role: Optional[NoteRole]) -> bool:
    return role in (NoteRole.OWNER, NoteRole.EDITOR)


def can_manage(role: Optional[NoteRole]) -> bool:
    return role is NoteRole.OWNER


def capabilities_for(note: NoteSnapshot, user_id: uuid.UUID) -> Capabilities:
    role = resolve_role(note, user_id)
    return Capabilities(can_view=can_view(role), can_edit=can_edit(role), can_manage=can_manage(role))


def require(
    note: NoteSnapshot,
    user_id: uuid.UUID,
    predicate: Callable[[Optional[NoteRole]], bool],
    message: str = "You do not have permission to perform this action",
) -> NoteRole:
    """
    Return the caller's role if it satisfies predicate.

    No role at all raises NotFoundError so the note's existence is not
    leaked; a role that is too weak raises AuthorizationError.
    """
    role = resolve_role(note, user_id)
    if not can_view(role):
        raise NotFoundError(NOTE_NOT_FOUND)
    if not predicate(role):
        raise AuthorizationError(message)
    return role
