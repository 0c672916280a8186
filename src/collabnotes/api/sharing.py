"""Sharing API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.notes import NoteListResponse, NoteResponse
from ..core.schemas.sharing import PermissionUpdateRequest, ShareRequest
from ..core.services import SharingService
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/notes", tags=["sharing"])


@router.get("/shared-with-me", response_model=NoteListResponse)
async def shared_with_me(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Notes other users shared with the caller."""
    sharing_service = SharingService(session)
    return await sharing_service.list_shared_with_me(current_user_id)


@router.post("/{note_id}/share", response_model=NoteResponse)
async def share_note(
    note_id: UUID,
    request: ShareRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Share a note by user id or email. Owner only."""
    sharing_service = SharingService(session)
    return await sharing_service.share_note(note_id, current_user_id, request)


@router.patch("/{note_id}/share/{user_id}", response_model=NoteResponse)
async def update_share(
    note_id: UUID,
    user_id: UUID,
    request: PermissionUpdateRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Change a collaborator's permission. Owner only."""
    sharing_service = SharingService(session)
    return await sharing_service.update_permission(note_id, current_user_id, user_id, request.permission)


@router.delete("/{note_id}/share/{user_id}", response_model=NoteResponse)
async def revoke_share(
    note_id: UUID,
    user_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Remove a collaborator. Owner only."""
    sharing_service = SharingService(session)
    return await sharing_service.revoke_share(note_id, current_user_id, user_id)
