"""
User model: identity plus the credential record.

The refresh and reset columns only ever hold sha256 hex digests, never the
raw tokens. A single refresh hash per user means issuing a new refresh
token invalidates the previous one.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel
from .types import UTCDateTime, as_utc, utc_now


class User(BaseModel):
    """User account with email/password auth."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    refresh_token_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    refresh_token_expires_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    password_reset_token_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    password_reset_expires_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        CheckConstraint("length(name) <= 80", name="ck_users_name_len"),
        Index("idx_users_email", "email"),
    )

    def __repr__(self) -> str:
        return f"<User(email='{self.email}')>"

    @property
    def has_live_refresh_token(self) -> bool:
        """True when a refresh hash is stored and has not expired."""
        expires_at = as_utc(self.refresh_token_expires_at)
        return bool(self.refresh_token_hash) and expires_at is not None and expires_at > utc_now()
