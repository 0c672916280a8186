"""
Service interfaces for CollabNotes.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ..schemas.auth import LoginRequest, RegisterRequest, ResetPasswordRequest, UserResponse
from ..schemas.notes import NoteCreate, NoteListResponse, NoteResponse, NoteUpdate
from ..schemas.notifications import NotificationListResponse
from ..schemas.sharing import ShareRequest
from ..models.share import SharePermission


class ResetLinkSender(ABC):
    """Delivers password reset links out of band."""

    @abstractmethod
    async def send(self, email: str, link: str) -> None:
        """Deliver link to email. May raise; callers log and continue."""
        pass


class IAuthService(ABC):
    """Account and session lifecycle."""

    @abstractmethod
    async def register_user(self, request: RegisterRequest):
        """Create account and start a session."""
        pass

    @abstractmethod
    async def authenticate_user(self, request: LoginRequest):
        """Check password and start a session."""
        pass

    @abstractmethod
    async def refresh_session(self, presented_token: str):
        """Rotate the refresh token."""
        pass

    @abstractmethod
    async def logout(self, presented_token: Optional[str]) -> None:
        """Best-effort session revocation."""
        pass

    @abstractmethod
    async def request_password_reset(self, email: str, sender: ResetLinkSender) -> None:
        """Issue a reset token if the account exists."""
        pass

    @abstractmethod
    async def reset_password(self, request: ResetPasswordRequest) -> None:
        """Redeem a reset token."""
        pass

    @abstractmethod
    async def get_current_user(self, user_id: UUID) -> UserResponse:
        """Get user by ID."""
        pass


class INoteService(ABC):
    """Note CRUD gated by role."""

    @abstractmethod
    async def create_note(self, user_id: UUID, request: NoteCreate) -> NoteResponse:
        pass

    @abstractmethod
    async def get_note(self, note_id: UUID, user_id: UUID) -> NoteResponse:
        pass

    @abstractmethod
    async def list_notes(
        self, user_id: UUID, archived: bool, trashed: bool, category: Optional[str]
    ) -> NoteListResponse:
        pass

    @abstractmethod
    async def update_note(self, note_id: UUID, user_id: UUID, request: NoteUpdate) -> NoteResponse:
        pass

    @abstractmethod
    async def set_archived(self, note_id: UUID, user_id: UUID, archived: bool) -> NoteResponse:
        pass

    @abstractmethod
    async def set_trashed(self, note_id: UUID, user_id: UUID, trashed: bool) -> NoteResponse:
        pass

    @abstractmethod
    async def delete_note(self, note_id: UUID, user_id: UUID) -> None:
        pass


class ISharingService(ABC):
    """Collaborator management."""

    @abstractmethod
    async def share_note(self, note_id: UUID, owner_id: UUID, request: ShareRequest) -> NoteResponse:
        pass

    @abstractmethod
    async def update_permission(
        self, note_id: UUID, owner_id: UUID, target_id: UUID, permission: SharePermission
    ) -> NoteResponse:
        pass

    @abstractmethod
    async def revoke_share(self, note_id: UUID, owner_id: UUID, target_id: UUID) -> NoteResponse:
        pass

    @abstractmethod
    async def list_shared_with_me(self, user_id: UUID) -> NoteListResponse:
        pass


class INotificationService(ABC):
    """Per-user notification feed."""

    @abstractmethod
    async def list_notifications(self, recipient_id: UUID) -> NotificationListResponse:
        pass

    @abstractmethod
    async def delete_notification(self, recipient_id: UUID, notification_id: UUID) -> None:
        pass

    @abstractmethod
    async def clear_notifications(self, recipient_id: UUID) -> int:
        pass
