"""
Pydantic schemas for API contracts.
"""

from .auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
)
from .common import ErrorResponse, HealthCheckResponse, MessageResponse
from .notes import (
    ActivityResponse,
    ArchiveRequest,
    Capabilities,
    CollaboratorResponse,
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    TrashRequest,
)
from .notifications import NotificationListResponse, NotificationResponse
from .sharing import PermissionUpdateRequest, ShareRequest
from .users import UserSearchResponse

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "TokenResponse",
    "UserResponse",
    "ErrorResponse",
    "MessageResponse",
    "HealthCheckResponse",
    "NoteCreate",
    "NoteUpdate",
    "ArchiveRequest",
    "TrashRequest",
    "NoteResponse",
    "NoteListResponse",
    "Capabilities",
    "CollaboratorResponse",
    "ActivityResponse",
    "ShareRequest",
    "PermissionUpdateRequest",
    "NotificationResponse",
    "NotificationListResponse",
    "UserSearchResponse",
]
