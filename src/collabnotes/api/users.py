"""User lookup endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.auth import UserResponse
from ..core.schemas.users import UserSearchResponse
from ..core.services import UserService
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/search", response_model=UserSearchResponse)
async def search_users(
    q: str = Query("", max_length=254, description="Email prefix"),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Find share targets by email prefix."""
    user_service = UserService(session)
    return await user_service.search(q, current_user_id)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    user_service = UserService(session)
    return await user_service.get_user(user_id)
