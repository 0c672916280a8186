"""Authentication dependencies."""

from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.exceptions import AuthenticationError
from ..security import get_user_id_from_token


class JWTBearer(HTTPBearer):
    """Bearer access token authentication. Resolves to the caller's user id."""

    def __init__(self):
        # missing headers are reported as AuthenticationError below, not by HTTPBearer
        super().__init__(auto_error=False)

    async def __call__(self, request: Request) -> UUID:
        credentials: Optional[HTTPAuthorizationCredentials] = await super().__call__(request)
        if not credentials or credentials.scheme.lower() != "bearer":
            raise AuthenticationError()

        user_id = get_user_id_from_token(credentials.credentials)
        if not user_id:
            raise AuthenticationError("Invalid or expired token")

        request.state.user_id = user_id
        return user_id


# Dependency for getting current user ID from JWT
async def get_current_user_id(user_id: UUID = Depends(JWTBearer())) -> UUID:
    """Get current authenticated user ID."""
    return user_id
