"""User repository for database operations."""

from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_user(self, user_data: dict) -> User:
        """Create new user."""
        user = User(**user_data)
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID, refreshing any copy already in the session."""
        stmt = (
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by (already normalised) email."""
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def is_email_taken(self, email: str) -> bool:
        return await self.get_by_email(email) is not None

    async def get_many(self, user_ids: Iterable[UUID]) -> dict[UUID, User]:
        """Map of id -> user for the ids that still exist."""
        ids = set(user_ids)
        if not ids:
            return {}
        stmt = select(User).where(User.id.in_(ids))
        result = await self.session.execute(stmt)
        return {user.id: user for user in result.scalars()}

    async def search_by_email_prefix(
        self, prefix: str, limit: int = 10, exclude_id: Optional[UUID] = None
    ) -> list[User]:
        """Users whose email starts with prefix, alphabetical."""
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        stmt = select(User).where(User.email.like(f"{escaped}%", escape="\\"))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        stmt = stmt.order_by(User.email).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars())
