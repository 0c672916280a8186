"""User lookup schemas."""

from typing import List

from pydantic import BaseModel

from .auth import UserResponse


class UserSearchResponse(BaseModel):
    users: List[UserResponse]
