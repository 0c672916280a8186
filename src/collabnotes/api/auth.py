"""Authentication API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..core.exception_handlers import error_response
from ..core.exceptions import AuthenticationError
from ..core.logging import get_logger
from ..core.rate_limit import RateLimiter
from ..core.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
)
from ..core.schemas.common import ErrorResponse, MessageResponse
from ..core.services import AuthService, SessionTokens, get_reset_link_sender
from ..core.services.auth_service import FORGOT_PASSWORD_MESSAGE
from ..core.services.interfaces import ResetLinkSender
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = get_logger(__name__)


def set_refresh_cookie(response: Response, tokens: SessionTokens) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=tokens.refresh_token,
        max_age=tokens.refresh_ttl_seconds,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_refresh_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        path=settings.refresh_cookie_path,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def presented_refresh_token(request: Request) -> str | None:
    return request.cookies.get(get_settings().refresh_cookie_name)


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimiter("auth:register"))],
)
async def register(
    request: RegisterRequest, response: Response, session: AsyncSession = Depends(get_db_session)
):
    """Register a new user and start a session."""
    auth_service = AuthService(session)
    result = await auth_service.register_user(request)
    set_refresh_cookie(response, result.tokens)
    return result.to_response()


@router.post("/login", response_model=TokenResponse, dependencies=[Depends(RateLimiter("auth:login"))])
async def login(
    request: LoginRequest, response: Response, session: AsyncSession = Depends(get_db_session)
):
    """Login user, returning an access token and setting the refresh cookie."""
    auth_service = AuthService(session)
    result = await auth_service.authenticate_user(request)
    set_refresh_cookie(response, result.tokens)
    return result.to_response()


@router.post(
    "/refresh",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}},
    dependencies=[Depends(RateLimiter("auth:refresh"))],
)
async def refresh(request: Request, response: Response, session: AsyncSession = Depends(get_db_session)):
    """Rotate the refresh cookie. Any failure clears it."""
    auth_service = AuthService(session)
    try:
        result = await auth_service.refresh_session(presented_refresh_token(request))
    except AuthenticationError as exc:
        logger.warning("Refresh rejected", extra={"path": request.url.path})
        failure = error_response(exc)
        clear_refresh_cookie(failure)
        return failure

    set_refresh_cookie(response, result.tokens)
    return result.to_response()


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response, session: AsyncSession = Depends(get_db_session)):
    """End the session tied to the refresh cookie, if any."""
    auth_service = AuthService(session)
    await auth_service.logout(presented_refresh_token(request))
    clear_refresh_cookie(response)
    return MessageResponse(message="Logged out")


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    dependencies=[Depends(RateLimiter("auth:forgot-password"))],
)
async def forgot_password(
    request: ForgotPasswordRequest,
    session: AsyncSession = Depends(get_db_session),
    sender: ResetLinkSender = Depends(get_reset_link_sender),
):
    """Start a password reset. The response never reveals whether the email exists."""
    auth_service = AuthService(session)
    await auth_service.request_password_reset(request.email, sender)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    dependencies=[Depends(RateLimiter("auth:reset-password"))],
)
async def reset_password(
    request: ResetPasswordRequest, response: Response, session: AsyncSession = Depends(get_db_session)
):
    """Set a new password with a reset token. Ends any existing session."""
    auth_service = AuthService(session)
    await auth_service.reset_password(request)
    clear_refresh_cookie(response)
    return MessageResponse(message="Password has been reset")


@router.get("/me", response_model=UserResponse)
async def get_current_user(
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Get current user profile."""
    auth_service = AuthService(session)
    return await auth_service.get_current_user(current_user_id)
