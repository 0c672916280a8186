"""
Application exceptions.

Services raise these; the handlers in exception_handlers.py turn them into
ErrorResponse payloads.
"""

from typing import Any, Optional


class ApplicationError(Exception):
    """Base exception for all application errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "internal_error",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ApplicationError):
    """Malformed or missing input. Details carry field-level messages."""

    status_code = 400

    def __init__(self, message: str = "Validation error", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, code="validation_error", details=details)


class AuthenticationError(ApplicationError):
    """Missing, invalid or expired credentials. Never says which check failed."""

    status_code = 401

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, code="authentication_failed")


class AuthorizationError(ApplicationError):
    """Role is insufficient for the requested action."""

    status_code = 403

    def __init__(self, message: str = "You do not have permission to perform this action") -> None:
        super().__init__(message, code="forbidden")


class NotFoundError(ApplicationError):
    """Resource is missing or not visible to the caller."""

    status_code = 404

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="not_found")


class ConflictError(ApplicationError):
    """Duplicate unique key or a state conflict."""

    status_code = 409

    def __init__(self, message: str = "Resource conflict", details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, code="conflict", details=details)


class RateLimitError(ApplicationError):
    """Too many requests in the current window."""

    status_code = 429

    def __init__(self, message: str = "Too many requests, please try again later") -> None:
        super().__init__(message, code="rate_limited")
