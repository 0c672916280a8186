"""Notes API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.common import MessageResponse
from ..core.schemas.notes import (
    RESERVED_CATEGORY_KEYS,
    ArchiveRequest,
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    TrashRequest,
)
from ..core.services import NoteService
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("", response_model=NoteListResponse)
async def list_notes(
    archived: bool = Query(False, description="List archived notes"),
    trashed: bool = Query(False, description="List trashed notes"),
    category: Optional[str] = Query(None, max_length=40, description="Category key, 'all' for every category"),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """List the caller's own notes."""
    if category is not None:
        category = category.strip().lower()
        if not category or category in RESERVED_CATEGORY_KEYS:
            category = None
    note_service = NoteService(session)
    return await note_service.list_notes(current_user_id, archived=archived, trashed=trashed, category=category)


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    request: NoteCreate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Create a new note."""
    note_service = NoteService(session)
    return await note_service.create_note(current_user_id, request)


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Get a note the caller owns or collaborates on."""
    note_service = NoteService(session)
    return await note_service.get_note(note_id, current_user_id)


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: UUID,
    request: NoteUpdate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Edit title/body (owner or editor) or category (owner)."""
    note_service = NoteService(session)
    return await note_service.update_note(note_id, current_user_id, request)


@router.post("/{note_id}/archive", response_model=NoteResponse)
async def archive_note(
    note_id: UUID,
    request: ArchiveRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    note_service = NoteService(session)
    return await note_service.set_archived(note_id, current_user_id, request.archived)


@router.post("/{note_id}/trash", response_model=NoteResponse)
async def trash_note(
    note_id: UUID,
    request: TrashRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    note_service = NoteService(session)
    return await note_service.set_trashed(note_id, current_user_id, request.trashed)


@router.delete("/{note_id}", response_model=MessageResponse)
async def delete_note(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Permanently delete a trashed note."""
    note_service = NoteService(session)
    await note_service.delete_note(note_id, current_user_id)
    return MessageResponse(message="Note deleted")
