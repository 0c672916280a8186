"""Sharing service implementation."""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..access import NoteSnapshot, can_manage, require
from ..exceptions import NotFoundError
from ..logging import get_logger
from ..models.note import Note
from ..models.share import SharePermission
from ..models.user import User
from ..repositories.note_repository import NoteRepository
from ..repositories.user_repository import UserRepository
from ..schemas.notes import NoteListResponse, NoteResponse
from ..schemas.sharing import ShareRequest
from ..sharing import NoteTransition, revoke_share, share_note, update_permission
from .interfaces import ISharingService
from .note_service import NoteService, build_note_view
from .notification_service import NotificationDispatcher

logger = get_logger(__name__)

USER_NOT_FOUND = "User not found"


class SharingService(ISharingService):
    """Collaborator management on top of NoteService's load/commit path."""

    def __init__(self, session: AsyncSession, dispatcher: Optional[NotificationDispatcher] = None):
        self.session = session
        self.note_repo = NoteRepository(session)
        self.user_repo = UserRepository(session)
        self.note_service = NoteService(session)
        self.dispatcher = dispatcher or NotificationDispatcher(session)

    async def _resolve_target(self, request: ShareRequest) -> User:
        if request.user_id is not None:
            user = await self.user_repo.get_by_id(request.user_id)
        else:
            user = await self.user_repo.get_by_email(str(request.email))
        if user is None:
            raise NotFoundError(USER_NOT_FOUND)
        return user

    async def _apply(
        self, note_id: UUID, note: Note, owner_id: UUID, transition: NoteTransition
    ) -> NoteResponse:
        note = await self.note_service.commit(note, transition, owner_id)
        if transition.intents:
            report = await self.dispatcher.dispatch(transition.intents)
            if report.failed:
                # the rollback expired everything loaded in this session
                note = await self.note_service.load(note_id)
        return build_note_view(note, owner_id)

    async def share_note(self, note_id: UUID, owner_id: UUID, request: ShareRequest) -> NoteResponse:
        """Grant a collaborator viewer or editor rights. Repeating a grant changes nothing."""
        note = await self.note_service.load(note_id)
        snapshot = NoteSnapshot.from_note(note)
        # check the caller before revealing whether the target user exists
        require(snapshot, owner_id, can_manage, "Only the owner can share this note")

        target = await self._resolve_target(request)
        transition = share_note(snapshot, owner_id, target.id, request.permission)
        return await self._apply(note_id, note, owner_id, transition)

    async def update_permission(
        self, note_id: UUID, owner_id: UUID, target_id: UUID, permission: SharePermission
    ) -> NoteResponse:
        note = await self.note_service.load(note_id)
        transition = update_permission(NoteSnapshot.from_note(note), owner_id, target_id, permission)
        return await self._apply(note_id, note, owner_id, transition)

    async def revoke_share(self, note_id: UUID, owner_id: UUID, target_id: UUID) -> NoteResponse:
        note = await self.note_service.load(note_id)
        transition = revoke_share(NoteSnapshot.from_note(note), owner_id, target_id)
        return await self._apply(note_id, note, owner_id, transition)

    async def list_shared_with_me(self, user_id: UUID) -> NoteListResponse:
        """Live notes shared with user_id, newest first, redacted collaborator views."""
        notes = await self.note_repo.list_shared_with(user_id)
        return NoteListResponse(notes=[build_note_view(note, user_id) for note in notes])
