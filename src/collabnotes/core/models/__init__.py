"""
Database models for CollabNotes.

Models included:
    - User: account plus credential record (refresh/reset token hashes)
    - Note: owned note content and archive/trash state
    - NoteShare: collaborator entries (viewer/editor)
    - NoteActivity: append-only per-note audit trail
    - Notification: per-recipient sharing events
"""

from .activity import ActivityAction, NoteActivity
from .base import BaseModel
from .note import DEFAULT_CATEGORY, Note
from .notification import Notification, NotificationType
from .share import NoteShare, SharePermission
from .user import User

__all__ = [
    "BaseModel",
    "User",
    "Note",
    "DEFAULT_CATEGORY",
    "NoteShare",
    "SharePermission",
    "NoteActivity",
    "ActivityAction",
    "Notification",
    "NotificationType",
]
