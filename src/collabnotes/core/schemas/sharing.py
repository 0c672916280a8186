"""
Note sharing schemas.

A share target is addressed either by user id or by email, never both.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ..models.share import SharePermission


class ShareRequest(BaseModel):
    """Grant or change a collaborator's permission."""

    user_id: Optional[uuid.UUID] = Field(default=None, description="Target user id")
    email: Optional[EmailStr] = Field(default=None, description="Target user email")
    permission: SharePermission = Field(default=SharePermission.VIEWER, description="viewer or editor")

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def exactly_one_target(self) -> "ShareRequest":
        if (self.user_id is None) == (self.email is None):
            raise ValueError("Provide exactly one of user_id or email")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "colleague@example.com", "permission": "viewer"}
        }
    )


class PermissionUpdateRequest(BaseModel):
    permission: SharePermission
