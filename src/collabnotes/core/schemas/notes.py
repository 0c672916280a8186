"""
Note schemas.

Request bodies for note CRUD and the read views returned to owners and
collaborators. Collaborator views leave ``shared_with`` and ``activity``
empty (None).
"""

import re
import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.note import DEFAULT_CATEGORY

TITLE_MAX_LENGTH = 200
BODY_MAX_LENGTH = 10000

# "all" is the listing wildcard and can never be stored as a category
RESERVED_CATEGORY_KEYS = frozenset({"all"})

_CATEGORY_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]{0,39}$")


def clean_category(value: str) -> str:
    """Lower-case and validate a category key."""
    key = value.strip().lower()
    if not _CATEGORY_PATTERN.match(key):
        raise ValueError("Category may only contain letters, numbers and hyphens (max 40)")
    if key in RESERVED_CATEGORY_KEYS:
        raise ValueError("This category name is reserved")
    return key


class NoteCreate(BaseModel):
    """Note creation request schema."""

    title: str = Field(default="", max_length=TITLE_MAX_LENGTH, description="Note title")
    body: str = Field(default="", max_length=BODY_MAX_LENGTH, description="Note body")
    category: str = Field(default=DEFAULT_CATEGORY, description="Category key")

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        return clean_category(v)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Q4 planning",
                "body": "1. Review Q3\n2. Set objectives",
                "category": "business",
            }
        }
    )


class NoteUpdate(BaseModel):
    """Partial update. Title/body need editor rights, category needs owner."""

    title: Optional[str] = Field(default=None, max_length=TITLE_MAX_LENGTH)
    body: Optional[str] = Field(default=None, max_length=BODY_MAX_LENGTH)
    category: Optional[str] = Field(default=None)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return clean_category(v)


class ArchiveRequest(BaseModel):
    archived: bool


class TrashRequest(BaseModel):
    trashed: bool


class Capabilities(BaseModel):
    can_view: bool
    can_edit: bool
    can_manage: bool


class CollaboratorResponse(BaseModel):
    """Share entry as seen by the owner."""

    user_id: uuid.UUID
    permission: str
    name: Optional[str] = None
    email: Optional[str] = None


class ActivityResponse(BaseModel):
    position: int
    action: str
    actor_id: uuid.UUID
    timestamp: datetime
    meta: dict[str, Any] = Field(default_factory=dict)


class NoteResponse(BaseModel):
    """Note read view annotated with the caller's role."""

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    body: str
    category: str
    is_archived: bool
    is_trashed: bool
    last_edited_by_id: Optional[uuid.UUID] = None
    last_edited_at: Optional[datetime] = None
    version: int
    created_at: datetime
    updated_at: datetime

    role: str = Field(description="Caller role: owner, editor or viewer")
    capabilities: Capabilities
    shared_with: Optional[List[CollaboratorResponse]] = Field(
        default=None, description="Only populated for the owner"
    )
    activity: Optional[List[ActivityResponse]] = Field(
        default=None, description="Only populated for the owner"
    )


class NoteListResponse(BaseModel):
    notes: List[NoteResponse]
