"""Unified exception hierarchy for Snapgram."""

from typing import Any


class SnapgramError(Exception):
    """Base exception for all Snapgram errors."""

    status_code = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ValidationError(SnapgramError):
    """Request validation failed."""

    status_code = 400


class NotFoundError(SnapgramError):
    """Base exception for resource not found errors.

    Reported as 400 like other validation failures; clients of the API
    rely on that status for missing entities.
    """

    status_code = 400


class UserNotFoundError(NotFoundError):
    """User not found."""

    pass


class PostNotFoundError(NotFoundError):
    """Post not found."""

    pass


class CommentNotFoundError(NotFoundError):
    """Comment not found."""

    pass


class AuthenticationError(SnapgramError):
    """Credentials, token or cookie missing, or the referenced user is gone."""

    status_code = 401


class ForbiddenError(SnapgramError):
    """Token present but invalid or expired."""

    status_code = 403


class ConflictError(SnapgramError):
    """Write conflicts with existing data."""

    status_code = 409


class ServiceError(SnapgramError):
    """Base exception for service-level errors."""

    status_code = 500


class StorageError(ServiceError):
    """Storage operation failed."""

    pass
