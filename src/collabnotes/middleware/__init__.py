"""Request middleware and auth dependencies."""

from .auth import JWTBearer, get_current_user_id

__all__ = ["JWTBearer", "get_current_user_id"]
