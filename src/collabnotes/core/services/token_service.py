"""
Session token lifecycle.

A session moves Anonymous -> Authenticated -> Refreshed* -> Revoked. The
only server-side state is the sha256 digest of the single live refresh
token on the user row, so issuing a token invalidates the previous one and
presenting a rotated-away token is detected as reuse.
"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ...security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    generate_reset_token,
    hashes_match,
    sha256_hex,
    subject_of,
)
from ..exceptions import AuthenticationError, ValidationError
from ..logging import get_logger
from ..models.types import as_utc, utc_now
from ..repositories.credential_repository import CredentialRepository
from ..repositories.user_repository import UserRepository

logger = get_logger(__name__)

SESSION_INVALID = "Invalid or expired session"
RESET_INVALID = "Invalid or expired reset token"


class IssuedRefreshToken(BaseModel):
    token: str
    expires_at: datetime
    ttl_seconds: int


class SessionTokens(BaseModel):
    """Everything a client needs after login, register or refresh."""

    user_id: UUID
    access_token: str
    expires_in: int
    refresh_token: str
    refresh_expires_at: datetime
    refresh_ttl_seconds: int


class TokenService:
    """Issues, rotates and revokes session and password-reset tokens."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.credential_repo = CredentialRepository(session)
        self.user_repo = UserRepository(session)
        self.settings = get_settings()

    def issue_access_token(self, user_id: UUID) -> str:
        return create_access_token(user_id)

    def issue_refresh_token(self, user_id: UUID) -> IssuedRefreshToken:
        token, expires_at = create_refresh_token(user_id)
        return IssuedRefreshToken(
            token=token,
            expires_at=expires_at,
            ttl_seconds=self.settings.refresh_token_ttl_seconds,
        )

    def _bundle(self, user_id: UUID, refresh: IssuedRefreshToken) -> SessionTokens:
        return SessionTokens(
            user_id=user_id,
            access_token=self.issue_access_token(user_id),
            expires_in=self.settings.access_token_expire_minutes * 60,
            refresh_token=refresh.token,
            refresh_expires_at=refresh.expires_at,
            refresh_ttl_seconds=refresh.ttl_seconds,
        )

    async def start_session(self, user_id: UUID) -> SessionTokens:
        """Issue a fresh pair and overwrite the stored refresh hash."""
        refresh = self.issue_refresh_token(user_id)
        await self.credential_repo.store_refresh(user_id, sha256_hex(refresh.token), refresh.expires_at)
        logger.info("Session started", extra={"user_id": str(user_id)})
        return self._bundle(user_id, refresh)

    async def rotate(self, presented: Optional[str]) -> SessionTokens:
        """
        Exchange a valid refresh token for a new pair.

        A well-signed token that does not match the stored hash is treated
        as reuse: the stored session is cleared so every token for the user
        stops working. The swap itself is conditional on the old hash, so of
        two concurrent rotations with the same token only one can win.
        """
        if not presented:
            raise AuthenticationError(SESSION_INVALID)

        user_id = subject_of(decode_refresh_token(presented))
        if user_id is None:
            raise AuthenticationError(SESSION_INVALID)

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise AuthenticationError(SESSION_INVALID)

        presented_hash = sha256_hex(presented)
        if not hashes_match(presented_hash, user.refresh_token_hash):
            await self._revoke_on_reuse(user_id, had_session=bool(user.refresh_token_hash))
            raise AuthenticationError(SESSION_INVALID)

        expires_at = as_utc(user.refresh_token_expires_at)
        if expires_at is None or expires_at <= utc_now():
            await self.credential_repo.clear_refresh(user_id)
            raise AuthenticationError(SESSION_INVALID)

        refresh = self.issue_refresh_token(user_id)
        swapped = await self.credential_repo.rotate_refresh(
            user_id, presented_hash, sha256_hex(refresh.token), refresh.expires_at
        )
        if not swapped:
            # another request rotated the same token first
            await self._revoke_on_reuse(user_id, had_session=True)
            raise AuthenticationError(SESSION_INVALID)

        logger.info("Session refreshed", extra={"user_id": str(user_id)})
        return self._bundle(user_id, refresh)

    async def _revoke_on_reuse(self, user_id: UUID, had_session: bool) -> None:
        await self.credential_repo.clear_refresh(user_id)
        if had_session:
            logger.warning(
                "Refresh token reuse detected, session revoked",
                extra={"user_id": str(user_id), "security_event": "refresh_token_reuse"},
            )

    async def revoke(self, user_id: UUID) -> None:
        await self.credential_repo.clear_refresh(user_id)
        logger.info("Session revoked", extra={"user_id": str(user_id)})

    async def revoke_presented(self, presented: Optional[str]) -> bool:
        """Logout path. Clears the session only if presented is the live token."""
        if not presented:
            return False
        user_id = subject_of(decode_refresh_token(presented))
        if user_id is None:
            return False
        cleared = await self.credential_repo.clear_refresh_if_matches(user_id, sha256_hex(presented))
        if cleared:
            logger.info("Session revoked", extra={"user_id": str(user_id)})
        return cleared

    async def issue_password_reset(self, user_id: UUID) -> str:
        """Store the digest of a new reset token and return the raw token."""
        token = generate_reset_token()
        expires_at = utc_now() + timedelta(minutes=self.settings.password_reset_expire_minutes)
        await self.credential_repo.store_password_reset(user_id, sha256_hex(token), expires_at)
        return token

    async def redeem_password_reset(self, user_id: UUID, token: str, password_hash: str) -> None:
        """
        Consume a reset token and set the new password hash.

        The same write clears the refresh hash, so a successful reset always
        ends the existing session. An expired token is cleared on sight.
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None or not user.password_reset_token_hash:
            raise ValidationError(RESET_INVALID)

        expires_at = as_utc(user.password_reset_expires_at)
        if expires_at is None or expires_at <= utc_now():
            await self.credential_repo.clear_password_reset(user_id)
            raise ValidationError(RESET_INVALID)

        token_hash = sha256_hex(token)
        if not hashes_match(token_hash, user.password_reset_token_hash):
            raise ValidationError(RESET_INVALID)

        if not await self.credential_repo.complete_password_reset(user_id, token_hash, password_hash):
            raise ValidationError(RESET_INVALID)
        logger.info("Password reset completed, session revoked", extra={"user_id": str(user_id)})
