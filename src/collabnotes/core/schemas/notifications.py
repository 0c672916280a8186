"""Notification feed schemas."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class NotificationActor(BaseModel):
    id: uuid.UUID
    name: Optional[str] = None
    email: Optional[str] = None


class NotificationResponse(BaseModel):
    """Feed entry enriched with the actor identity and current note title."""

    id: uuid.UUID
    type: str
    permission: Optional[str] = None
    note_id: uuid.UUID
    note_title: str = Field(description="Current title, or a placeholder if the note is gone")
    actor: NotificationActor
    message: str = Field(description="Human readable summary")
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
