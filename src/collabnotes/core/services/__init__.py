"""Service layer for business logic."""

from .auth_service import AuthService, AuthSession
from .note_service import NoteService
from .notification_service import DispatchReport, NotificationDispatcher, NotificationService
from .reset_links import LoggingResetLinkSender, get_reset_link_sender
from .sharing_service import SharingService
from .token_service import SessionTokens, TokenService
from .user_service import UserService

__all__ = [
    "AuthService",
    "AuthSession",
    "TokenService",
    "SessionTokens",
    "NoteService",
    "SharingService",
    "NotificationService",
    "NotificationDispatcher",
    "DispatchReport",
    "UserService",
    "LoggingResetLinkSender",
    "get_reset_link_sender",
]
