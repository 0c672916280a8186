"""User lookup for picking share targets."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..exceptions import NotFoundError
from ..repositories.user_repository import UserRepository
from ..schemas.auth import UserResponse
from ..schemas.users import UserSearchResponse

MIN_QUERY_LENGTH = 2


class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.settings = get_settings()

    async def search(self, query: str, current_user_id: UUID) -> UserSearchResponse:
        """Email prefix match. Queries under two characters return nothing."""
        prefix = query.strip().lower()
        if len(prefix) < MIN_QUERY_LENGTH:
            return UserSearchResponse(users=[])
        users = await self.user_repo.search_by_email_prefix(
            prefix, limit=self.settings.user_search_limit, exclude_id=current_user_id
        )
        return UserSearchResponse(users=[UserResponse.model_validate(user) for user in users])

    async def get_user(self, user_id: UUID) -> UserResponse:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserResponse.model_validate(user)
