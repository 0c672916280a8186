"""
Authentication schemas.

These schemas define the API contracts for registration, login, session
refresh and the password reset flow. The refresh token itself never
appears in a body; it travels in an http-only cookie.
"""

import re
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "Password must contain a lowercase letter"),
    (re.compile(r"[A-Z]"), "Password must contain an uppercase letter"),
    (re.compile(r"\d"), "Password must contain a number"),
    (re.compile(r"[^A-Za-z0-9]"), "Password must contain a special character"),
)


def check_password_strength(password: str) -> str:
    """Raise ValueError with the first unmet rule."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(password):
            raise ValueError(message)
    return password


def normalize_email(value: str) -> str:
    return value.strip().lower()


class RegisterRequest(BaseModel):
    """User registration request schema."""

    name: str = Field(min_length=2, max_length=80, description="Display name")
    email: EmailStr = Field(description="Login email, stored lower-cased")
    password: str = Field(max_length=PASSWORD_MAX_LENGTH, description="Account password")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name is required")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v):
        return normalize_email(v) if isinstance(v, str) else v

    @field_validator("password")
    @classmethod
    def strong_password(cls, v: str) -> str:
        return check_password_strength(v)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "password": "Analytical#1843",
            }
        }
    )


class LoginRequest(BaseModel):
    """User login request schema."""

    email: EmailStr = Field(description="Login email")
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH, description="Account password")

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v):
        return normalize_email(v) if isinstance(v, str) else v


class ForgotPasswordRequest(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v):
        return normalize_email(v) if isinstance(v, str) else v


class ResetPasswordRequest(BaseModel):
    """Redeem a reset token delivered by the reset link."""

    user_id: uuid.UUID = Field(description="User the token was issued for")
    token: str = Field(min_length=1, max_length=256, description="Raw reset token from the link")
    password: str = Field(max_length=PASSWORD_MAX_LENGTH, description="New password")

    @field_validator("password")
    @classmethod
    def strong_password(cls, v: str) -> str:
        return check_password_strength(v)


class UserResponse(BaseModel):
    """Public user identity."""

    id: uuid.UUID = Field(description="User unique identifier")
    name: str = Field(description="Display name")
    email: EmailStr = Field(description="Email address")
    created_at: Optional[datetime] = Field(default=None, description="Account creation timestamp")

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Access token plus the authenticated user."""

    access_token: str = Field(description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(description="Access token lifetime in seconds")
    user: UserResponse = Field(description="User information")
