"""
Shared response schemas - errors, plain messages, health.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(description="Error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(default_factory=_now, description="Error timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "validation_error",
                "message": "Validation error",
                "details": {"password": "Password must contain an uppercase letter"},
                "timestamp": "2025-09-13T17:23:45Z",
            }
        }
    )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str = Field(description="Result message")


class HealthCheckResponse(BaseModel):
    """Liveness probe response."""

    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(default_factory=_now)
    version: str = Field(description="Application version")
    checks: dict[str, str] = Field(default_factory=dict, description="Component status")
