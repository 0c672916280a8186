"""JWT token utilities."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import JWTError, jwt

from ..config import get_settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def _encode(claims: Dict[str, Any], secret: str, expires_delta: timedelta) -> tuple[str, datetime]:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + expires_delta
    # jti keeps two tokens issued in the same second distinct
    to_encode = {**claims, "exp": expire, "jti": str(uuid.uuid4())}
    return jwt.encode(to_encode, secret, algorithm=settings.algorithm), expire


def create_access_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create a short-lived access token."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    token, _ = _encode(
        {"sub": str(user_id), "type": ACCESS_TOKEN_TYPE}, settings.secret_key, expires_delta
    )
    return token


def create_refresh_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> tuple[str, datetime]:
    """Create a refresh token signed with the refresh secret. Returns (token, expires_at)."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.refresh_token_expire_days)
    return _encode(
        {"sub": str(user_id), "type": REFRESH_TOKEN_TYPE}, settings.refresh_secret_key, expires_delta
    )


def _decode(token: str, secret: str, expected_type: str) -> Optional[Dict[str, Any]]:
    settings = get_settings()
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.algorithm])
    except JWTError:
        return None

    if payload.get("type") != expected_type:
        return None
    return payload


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and validate an access token. None when invalid or expired."""
    return _decode(token, get_settings().secret_key, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and validate a refresh token. None when invalid or expired."""
    return _decode(token, get_settings().refresh_secret_key, REFRESH_TOKEN_TYPE)


def subject_of(payload: Optional[Dict[str, Any]]) -> Optional[UUID]:
    """Extract the user id from decoded claims."""
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    try:
        return UUID(user_id)
    except ValueError:
        return None


def get_user_id_from_token(token: str) -> Optional[UUID]:
    """Extract user ID from an access token."""
    return subject_of(decode_access_token(token))
