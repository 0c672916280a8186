"""
Credential record storage.

Every write that depends on the currently stored hash is a single
conditional UPDATE, so the check and the write cannot be interleaved by a
concurrent request. Methods returning bool report whether a row matched.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User

_CLEARED_REFRESH = {"refresh_token_hash": None, "refresh_token_expires_at": None}
_CLEARED_RESET = {"password_reset_token_hash": None, "password_reset_expires_at": None}


class CredentialRepository:
    """Refresh and reset token hashes stored on the user row."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _update(self, user_id: UUID, values: dict, *conditions) -> bool:
        stmt = (
            update(User)
            .where(User.id == user_id, *conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1

    async def store_refresh(self, user_id: UUID, token_hash: str, expires_at: datetime) -> bool:
        """Overwrite the live refresh hash, invalidating any previous token."""
        return await self._update(
            user_id, {"refresh_token_hash": token_hash, "refresh_token_expires_at": expires_at}
        )

    async def rotate_refresh(
        self, user_id: UUID, old_hash: str, new_hash: str, expires_at: datetime
    ) -> bool:
        """Swap old_hash for new_hash. False if old_hash is no longer the stored one."""
        return await self._update(
            user_id,
            {"refresh_token_hash": new_hash, "refresh_token_expires_at": expires_at},
            User.refresh_token_hash == old_hash,
        )

    async def clear_refresh(self, user_id: UUID) -> bool:
        return await self._update(user_id, dict(_CLEARED_REFRESH))

    async def clear_refresh_if_matches(self, user_id: UUID, token_hash: str) -> bool:
        return await self._update(user_id, dict(_CLEARED_REFRESH), User.refresh_token_hash == token_hash)

    async def store_password_reset(self, user_id: UUID, token_hash: str, expires_at: datetime) -> bool:
        return await self._update(
            user_id, {"password_reset_token_hash": token_hash, "password_reset_expires_at": expires_at}
        )

    async def clear_password_reset(self, user_id: UUID) -> bool:
        return await self._update(user_id, dict(_CLEARED_RESET))

    async def complete_password_reset(
        self, user_id: UUID, token_hash: str, password_hash: str
    ) -> bool:
        """
        Set the new password, consume the reset token and end the session.

        Guarded on the reset hash so a token can only be redeemed once.
        """
        values: dict[str, Optional[object]] = {
            "password_hash": password_hash,
            **_CLEARED_RESET,
            **_CLEARED_REFRESH,
        }
        return await self._update(user_id, values, User.password_reset_token_hash == token_hash)
