"""Authentication service implementation."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ...security import hash_password, verify_password
from ...security.password import DUMMY_PASSWORD_HASH
from ..exceptions import AuthenticationError, ConflictError
from ..logging import get_logger
from ..repositories.user_repository import UserRepository
from ..schemas.auth import (
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
)
from .interfaces import IAuthService, ResetLinkSender
from .reset_links import build_reset_link
from .token_service import SessionTokens, TokenService

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
EMAIL_TAKEN = "Email already in use"
FORGOT_PASSWORD_MESSAGE = "If the email exists, a reset link will be sent"


class AuthSession(BaseModel):
    """Result of a successful register/login/refresh."""

    user: UserResponse
    tokens: SessionTokens

    def to_response(self) -> TokenResponse:
        return TokenResponse(
            access_token=self.tokens.access_token,
            expires_in=self.tokens.expires_in,
            user=self.user,
        )


class AuthService(IAuthService):
    """Authentication service implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)
        self.token_service = TokenService(session)
        self.settings = get_settings()

    async def register_user(self, request: RegisterRequest) -> AuthSession:
        """Register new user and start their first session."""
        if await self.user_repo.is_email_taken(request.email):
            raise ConflictError(EMAIL_TAKEN, details={"email": EMAIL_TAKEN})

        user_data = {
            "name": request.name,
            "email": request.email,
            "password_hash": hash_password(request.password),
        }
        try:
            user = await self.user_repo.create_user(user_data)
        except IntegrityError as exc:
            # lost a race with a concurrent registration
            await self.session.rollback()
            raise ConflictError(EMAIL_TAKEN, details={"email": EMAIL_TAKEN}) from exc

        logger.info("User registered", extra={"user_id": str(user.id)})
        tokens = await self.token_service.start_session(user.id)
        return AuthSession(user=UserResponse.model_validate(user), tokens=tokens)

    async def authenticate_user(self, request: LoginRequest) -> AuthSession:
        """Login user and return tokens."""
        user = await self.user_repo.get_by_email(request.email)
        if user is None:
            # same hashing cost as a real check
            verify_password(request.password, DUMMY_PASSWORD_HASH)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not verify_password(request.password, user.password_hash):
            logger.info("Failed login", extra={"user_id": str(user.id)})
            raise AuthenticationError(INVALID_CREDENTIALS)

        tokens = await self.token_service.start_session(user.id)
        return AuthSession(user=UserResponse.model_validate(user), tokens=tokens)

    async def refresh_session(self, presented_token: Optional[str]) -> AuthSession:
        tokens = await self.token_service.rotate(presented_token)
        user = await self.user_repo.get_by_id(tokens.user_id)
        if user is None:
            raise AuthenticationError()
        return AuthSession(user=UserResponse.model_validate(user), tokens=tokens)

    async def logout(self, presented_token: Optional[str]) -> None:
        await self.token_service.revoke_presented(presented_token)

    async def request_password_reset(self, email: str, sender: ResetLinkSender) -> None:
        """
        Issue a reset token when the account exists.

        Returns nothing either way so callers cannot tell whether the email
        is registered. Delivery failures are logged and dropped.
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        token = await self.token_service.issue_password_reset(user.id)
        try:
            await sender.send(user.email, build_reset_link(user.id, token))
        except Exception:
            logger.exception("Reset link delivery failed", extra={"user_id": str(user.id)})

    async def reset_password(self, request: ResetPasswordRequest) -> None:
        await self.token_service.redeem_password_reset(
            request.user_id, request.token, hash_password(request.password)
        )

    async def get_current_user(self, user_id: UUID) -> UserResponse:
        """Get user by ID."""
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise AuthenticationError()
        return UserResponse.model_validate(user)
