"""
Note service implementation.

Every mutation follows the same path: load the note, take a snapshot,
run the pure transform from core.sharing, then write it back with the
version-conditional update in NoteRepository.apply_transition.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..access import (
    NOTE_NOT_FOUND,
    NoteRole,
    NoteSnapshot,
    can_view,
    capabilities_for,
    require,
    resolve_role,
)
from ..exceptions import NotFoundError
from ..logging import get_logger
from ..models.note import Note
from ..repositories.note_repository import NoteRepository
from ..schemas.notes import (
    ActivityResponse,
    Capabilities,
    CollaboratorResponse,
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
)
from ..sharing import (
    NoteTransition,
    change_category,
    created_activity,
    edit_content,
    ensure_deletable,
    set_archived,
    set_trashed,
    unchanged,
)
from .interfaces import INoteService

logger = get_logger(__name__)


def build_note_view(note: Note, user_id: UUID) -> NoteResponse:
    """
    Serialize a note for user_id.

    Collaborators and the activity log are only shown to the owner.
    """
    snapshot = NoteSnapshot.from_note(note)
    role = resolve_role(snapshot, user_id)
    if role is None:
        raise NotFoundError(NOTE_NOT_FOUND)

    shared_with = None
    activity = None
    if role is NoteRole.OWNER:
        shared_with = [
            CollaboratorResponse(
                user_id=share.user_id,
                permission=share.permission,
                name=share.user.name if share.user else None,
                email=share.user.email if share.user else None,
            )
            for share in note.shares
        ]
        activity = [
            ActivityResponse(
                position=entry.position,
                action=entry.action,
                actor_id=entry.actor_id,
                timestamp=entry.timestamp,
                meta=entry.meta or {},
            )
            for entry in note.activities
        ]

    return NoteResponse(
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
        created_at=note.created_at,
        updated_at=note.updated_at,
        role=role.value,
        capabilities=Capabilities(**capabilities_for(snapshot, user_id).model_dump()),
        shared_with=shared_with,
        activity=activity,
    )


class NoteService(INoteService):
    """Note CRUD gated by per-note role."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.note_repo = NoteRepository(session)

    async def load(self, note_id: UUID) -> Note:
        note = await self.note_repo.get_by_id(note_id)
        if note is None:
            raise NotFoundError(NOTE_NOT_FOUND)
        return note

    async def commit(
        self, note: Note, transition: NoteTransition, actor_id: UUID, allow_editors: bool = False
    ) -> Note:
        """Apply transition and return the reloaded note."""
        if not transition.changed:
            return note
        await self.note_repo.apply_transition(transition, actor_id, allow_editors=allow_editors)
        logger.info(
            "Note updated",
            extra={
                "note_id": str(note.id),
                "actor_id": str(actor_id),
                "actions": [entry.action.value for entry in transition.activities],
                "version": transition.after.version,
            },
        )
        return await self.load(note.id)

    async def create_note(self, user_id: UUID, request: NoteCreate) -> NoteResponse:
        note_data = {
            "owner_id": user_id,
            "title": request.title,
            "body": request.body,
            "category": request.category,
        }
        note = await self.note_repo.create_note(note_data, created_activity(user_id))
        logger.info("Note created", extra={"note_id": str(note.id), "actor_id": str(user_id)})
        return build_note_view(note, user_id)

    async def get_note(self, note_id: UUID, user_id: UUID) -> NoteResponse:
        note = await self.load(note_id)
        require(NoteSnapshot.from_note(note), user_id, can_view)
        return build_note_view(note, user_id)

    async def list_notes(
        self,
        user_id: UUID,
        archived: bool = False,
        trashed: bool = False,
        category: Optional[str] = None,
    ) -> NoteListResponse:
        notes = await self.note_repo.list_owned(user_id, archived=archived, trashed=trashed, category=category)
        return NoteListResponse(notes=[build_note_view(note, user_id) for note in notes])

    async def update_note(self, note_id: UUID, user_id: UUID, request: NoteUpdate) -> NoteResponse:
        """Edit title/body (editors allowed) and/or category (owner only)."""
        note = await self.load(note_id)
        snapshot = NoteSnapshot.from_note(note)
        require(snapshot, user_id, can_view)

        transition = unchanged(snapshot)
        if request.title is not None or request.body is not None:
            transition = edit_content(snapshot, user_id, title=request.title, body=request.body)
        if request.category is not None:
            transition = transition.merge(change_category(transition.after, user_id, request.category))

        note = await self.commit(note, transition, user_id, allow_editors=request.category is None)
        return build_note_view(note, user_id)

    async def set_archived(self, note_id: UUID, user_id: UUID, archived: bool) -> NoteResponse:
        note = await self.load(note_id)
        transition = set_archived(NoteSnapshot.from_note(note), user_id, archived)
        note = await self.commit(note, transition, user_id)
        return build_note_view(note, user_id)

    async def set_trashed(self, note_id: UUID, user_id: UUID, trashed: bool) -> NoteResponse:
        note = await self.load(note_id)
        transition = set_trashed(NoteSnapshot.from_note(note), user_id, trashed)
        note = await self.commit(note, transition, user_id)
        return build_note_view(note, user_id)

    async def delete_note(self, note_id: UUID, user_id: UUID) -> None:
        note = await self.load(note_id)
        snapshot = NoteSnapshot.from_note(note)
        ensure_deletable(snapshot, user_id)
        await self.note_repo.delete_note(note_id, user_id, snapshot.version)
        self.session.expunge(note)
        logger.info("Note deleted", extra={"note_id": str(note_id), "actor_id": str(user_id)})
