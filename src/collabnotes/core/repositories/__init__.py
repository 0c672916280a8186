"""Repository layer for data access."""

from .credential_repository import CredentialRepository
from .note_repository import NoteRepository
from .notification_repository import NotificationRepository
from .user_repository import UserRepository

__all__ = [
    "UserRepository",
    "CredentialRepository",
    "NoteRepository",
    "NotificationRepository",
]
