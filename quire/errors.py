"""
Error taxonomy.

Every error a route can surface is an `AppError` carrying its HTTP status
and the JSON body shape clients already rely on:

    {"code": 422, "reason": "ValidationError", "message": "...", "location": "email"}

`HashingError` and `SigningError` are internal to the auth core and never
reach a client directly.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base for errors that map directly to an HTTP response."""

    status_code: int = 500
    reason: str = "InternalError"

    def __init__(self, message: str, location: str | None = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "code": self.status_code,
            "reason": self.reason,
            "message": self.message,
        }
        if self.location is not None:
            body["location"] = self.location
        return body


class ValidationError(AppError):
    """Malformed or missing input the client can correct."""

    status_code = 422
    reason = "ValidationError"


class BadRequestError(AppError):
    """Request body is missing entirely or unusable."""

    status_code = 400
    reason = "BadRequest"


class AuthenticationError(AppError):
    """Missing, invalid, expired or mis-signed token, or bad credentials."""

    status_code = 401
    reason = "AuthenticationError"


class AuthorizationError(AppError):
    """
    Valid identity, insufficient privilege.

    Rendered as 401 rather than 403 so status codes don't reveal whether
    the resource exists.
    """

    status_code = 401
    reason = "AuthenticationError"


class ForbiddenError(AppError):
    """Only raised when someone tries to delete another user's admin account."""

    status_code = 403
    reason = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    reason = "NotFound"


class InternalError(AppError):
    """Unexpected failure. The message is never sent to the client."""

    status_code = 500
    reason = "InternalError"

    def to_dict(self) -> dict[str, Any]:
        return {"code": 500, "message": "Internal server error"}


# =============================================================================
# Auth core failures
# =============================================================================


class HashingError(Exception):
    """The password hash function failed internally."""


class SigningError(Exception):
    """Signing configuration is unusable (empty secret, bad algorithm)."""
