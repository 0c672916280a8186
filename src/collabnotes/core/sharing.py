"""
Note mutation rules.

Each transform takes an immutable NoteSnapshot and returns a NoteTransition
describing the new snapshot, the column values to write, share rows to
upsert or remove, activity entries to append and notifications to emit.
Nothing here touches the database; services apply the transition with a
version-conditional write.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .access import (
    NoteSnapshot,
    ShareEntry,
    can_edit,
    can_manage,
    require,
)
from .exceptions import ConflictError, NotFoundError, ValidationError
from .models.activity import ActivityAction
from .models.notification import NotificationType
from .models.share import SharePermission
from .models.types import utc_now

COLLABORATOR_NOT_FOUND = "Collaborator not found"


class ActivityEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    position: int
    action: ActivityAction
    actor_id: uuid.UUID
    timestamp: datetime
    meta: Dict[str, Any] = Field(default_factory=dict)


class NotificationIntent(BaseModel):
    """A notification to append after the note write has committed."""

    model_config = ConfigDict(frozen=True)

    recipient_id: uuid.UUID
    actor_id: uuid.UUID
    note_id: uuid.UUID
    type: NotificationType
    permission: Optional[SharePermission] = None


class NoteTransition(BaseModel):
    model_config = ConfigDict(frozen=True)

    before: NoteSnapshot
    after: NoteSnapshot
    values: Dict[str, Any] = Field(default_factory=dict)
    share_upserts: Tuple[ShareEntry, ...] = ()
    share_removals: Tuple[uuid.UUID, ...] = ()
    activities: Tuple[ActivityEntry, ...] = ()
    intents: Tuple[NotificationIntent, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.values or self.share_upserts or self.share_removals or self.activities)

    @property
    def expected_version(self) -> int:
        return self.before.version

    def merge(self, other: "NoteTransition") -> "NoteTransition":
        """Combine with a transition computed from this one's ``after`` snapshot."""
        if other.before != self.after:
            raise ValueError("Transitions must be chained")
        after = other.after
        if self.changed and other.changed:
            # one write bumps the version once
            after = after.model_copy(update={"version": self.before.version + 1})
        return NoteTransition(
            before=self.before,
            after=after,
            values={**self.values, **other.values},
            share_upserts=self.share_upserts + other.share_upserts,
            share_removals=self.share_removals + other.share_removals,
            activities=self.activities + other.activities,
            intents=self.intents + other.intents,
        )


def unchanged(note: NoteSnapshot) -> NoteTransition:
    return NoteTransition(before=note, after=note)


def _activity(
    note: NoteSnapshot,
    action: ActivityAction,
    actor_id: uuid.UUID,
    now: datetime,
    **meta: Any,
) -> ActivityEntry:
    return ActivityEntry(
        position=note.activity_count,
        action=action,
        actor_id=actor_id,
        timestamp=now,
        meta=meta,
    )


def _transition(
    note: NoteSnapshot,
    activity: ActivityEntry,
    values: Optional[Dict[str, Any]] = None,
    shared_with: Optional[Tuple[ShareEntry, ...]] = None,
    **changes: Any,
) -> NoteTransition:
    values = values or {}
    update: Dict[str, Any] = {
        **values,
        "version": note.version + 1,
        "activity_count": note.activity_count + 1,
    }
    if shared_with is not None:
        update["shared_with"] = shared_with
    return NoteTransition(
        before=note,
        after=note.model_copy(update=update),
        values=values,
        activities=(activity,),
        **changes,
    )


def created_activity(owner_id: uuid.UUID, now: Optional[datetime] = None) -> ActivityEntry:
    """First log entry of every note."""
    return ActivityEntry(
        position=0,
        action=ActivityAction.CREATED,
        actor_id=owner_id,
        timestamp=now or utc_now(),
    )


def share_note(
    note: NoteSnapshot,
    actor_id: uuid.UUID,
    target_id: uuid.UUID,
    permission: SharePermission,
    now: Optional[datetime] = None,
) -> NoteTransition:
    """Grant target a permission. Re-granting the same permission is a no-op."""
    require(note, actor_id, can_manage, "Only the owner can share this note")
    if target_id == note.owner_id:
        raise ValidationError("Cannot share a note with its owner", details={"user_id": "Target is the note owner"})

    permission = SharePermission(permission)
    existing = note.share_for(target_id)
    if existing is not None:
        if existing.permission == permission:
            return unchanged(note)
        return _change_permission(note, actor_id, existing, permission, now or utc_now())

    now = now or utc_now()
    entry = ShareEntry(user_id=target_id, permission=permission)
    return _transition(
        note,
        _activity(note, ActivityAction.SHARED, actor_id, now, user_id=str(target_id), permission=permission.value),
        shared_with=note.shared_with + (entry,),
        share_upserts=(entry,),
        intents=(
            NotificationIntent(
                recipient_id=target_id,
                actor_id=actor_id,
                note_id=note.id,
                type=NotificationType.SHARED,
                permission=permission,
            ),
        ),
    )


def _change_permission(
    note: NoteSnapshot,
    actor_id: uuid.UUID,
    existing: ShareEntry,
    permission: SharePermission,
    now: datetime,
) -> NoteTransition:
    entry = ShareEntry(user_id=existing.user_id, permission=permission)
    shared_with = tuple(entry if e.user_id == existing.user_id else e for e in note.shared_with)
    return _transition(
        note,
        _activity(
            note,
            ActivityAction.PERMISSION_CHANGED,
            actor_id,
            now,
            user_id=str(existing.user_id),
            previous=existing.permission.value,
            permission=permission.value,
        ),
        shared_with=shared_with,
        share_upserts=(entry,),
        intents=(
            NotificationIntent(
                recipient_id=existing.user_id,
                actor_id=actor_id,
                note_id=note.id,
                type=NotificationType.PERMISSION_CHANGED,
                permission=permission,
            ),
        ),
    )


def update_permission(
    note: NoteSnapshot,
    actor_id: uuid.UUID,
    target_id: uuid.UUID,
    permission: SharePermission,
    now: Optional[datetime] = None,
) -> NoteTransition:
    """Change an existing collaborator's permission."""
    require(note, actor_id, can_manage, "Only the owner can change permissions")
    existing = note.share_for(target_id)
    if existing is None:
        raise NotFoundError(COLLABORATOR_NOT_FOUND)

    permission = SharePermission(permission)
    if existing.permission == permission:
        return unchanged(note)
    return _change_permission(note, actor_id, existing, permission, now or utc_now())


def revoke_share(
    note: NoteSnapshot,
    actor_id: uuid.UUID,
    target_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> NoteTransition:
    """Remove a collaborator."""
    require(note, actor_id, can_manage, "Only the owner can revoke access")
    existing = note.share_for(target_id)
    if existing is None:
        raise NotFoundError(COLLABORATOR_NOT_FOUND)

    now = now or utc_now()
    return _transition(
        note,
        _activity(
            note,
            ActivityAction.UNSHARED,
            actor_id,
            now,
            user_id=str(target_id),
            permission=existing.permission.value,
        ),
        shared_with=tuple(e for e in note.shared_with if e.user_id != target_id),
        share_removals=(target_id,),
        intents=(
            NotificationIntent(
                recipient_id=target_id,
                actor_id=actor_id,
                note_id=note.id,
                type=NotificationType.UNSHARED,
            ),
        ),
    )


def edit_content(
    note: NoteSnapshot,
    actor_id: uuid.UUID,
    title: Optional[str] = None,
    body: Optional[str] = None,
    now: Optional[datetime] = None,
) -> NoteTransition:
    """
    Update title and/or body.

    Only fields whose value differs from the stored one count as changed.
    Resubmitting identical content logs nothing and leaves the last-edited
    stamp alone.
    """
    require(note, actor_id, can_edit, "You do not have permission to edit this note")

    values: Dict[str, Any] = {}
    if title is not None and title != note.title:
        values["title"] = title
    if body is not None and body != note.body:
        values["body"] = body
    if not values:
        return unchanged(note)

    now = now or utc_now()
    fields = [name for name in ("title", "body") if name in values]
    values["last_edited_by_id"] = actor_id
    values["last_edited_at"] = now
    return _transition(
        note,
        _activity(note, ActivityAction.EDITED, actor_id, now, fields=fields),
        values=values,
    )


def set_archived(
    note: NoteSnapshot,
    actor_id: uuid.UUID,
    archived: bool,
    now: Optional[datetime] = None,
) -> NoteTransition:
    """Archive or unarchive. Archiving takes the note out of the trash."""
    require(note, actor_id, can_manage, "Only the owner can archive this note")
    if note.is_archived == archived:
        return unchanged(note)

    values: Dict[str, Any] = {"is_archived": archived}
    meta: Dict[str, Any] = {}
    if archived and note.is_trashed:
        values["is_trashed"] = False
        meta["restored_from_trash"] = True

    action = ActivityAction.ARCHIVED if archived else ActivityAction.UNARCHIVED
    return _transition(note, _activity(note, action, actor_id, now or utc_now(), **meta), values=values)


def set_trashed(
    note: NoteSnapshot,
    actor_id: uuid.UUID,
    trashed: bool,
    now: Optional[datetime] = None,
) -> NoteTransition:
    """Move to or restore from the trash. Trashing clears the archive flag."""
    require(note, actor_id, can_manage, "Only the owner can trash this note")
    if note.is_trashed == trashed:
        return unchanged(note)

    values: Dict[str, Any] = {"is_trashed": trashed}
    meta: Dict[str, Any] = {}
    if trashed and note.is_archived:
        values["is_archived"] = False
        meta["unarchived"] = True

    action = ActivityAction.TRASHED if trashed else ActivityAction.RESTORED
    return _transition(note, _activity(note, action, actor_id, now or utc_now(), **meta), values=values)


def change_category(
    note: NoteSnapshot,
    actor_id: uuid.UUID,
    category: str,
    now: Optional[datetime] = None,
) -> NoteTransition:
    require(note, actor_id, can_manage, "Only the owner can change the category")
    if category == note.category:
        return unchanged(note)

    return _transition(
        note,
        _activity(
            note,
            ActivityAction.CATEGORY_CHANGED,
            actor_id,
            now or utc_now(),
            previous=note.category,
            category=category,
        ),
        values={"category": category},
    )


def ensure_deletable(note: NoteSnapshot, actor_id: uuid.UUID) -> None:
    """Only the owner may destroy a note, and only once it is in the trash."""
    require(note, actor_id, can_manage, "Only the owner can delete this note")
    if not note.is_trashed:
        raise ConflictError("Move the note to the trash before deleting it")
