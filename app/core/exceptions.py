"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── AuthenticationError - Bad credentials (401)
    ├── PermissionDeniedError - Authorization failures (403)
    ├── NotFoundError - Resource not found (404)
    └── ConflictError - State conflicts such as duplicates (409)

Usage:
    from core.exceptions import NotFoundError

    raise NotFoundError("Chat not found", error_code="CHAT_NOT_FOUND")

    # Views do not need to catch these: application_exception_handler
    # (registered as DRF's EXCEPTION_HANDLER) converts them to responses.

Note:
    These exceptions are for domain/business logic errors.
    DRF handles API-layer exceptions (serialization, authentication, etc.).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rest_framework import status

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        status_code: HTTP status used when rendered by the API
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Chat not found",
                "error_code": "CHAT_NOT_FOUND",
                "details": {"chat_id": 12}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class AuthenticationError(BaseApplicationError):
    """
    Raised when presented credentials do not identify an active user.

    Missing or malformed bearer tokens are rejected earlier by DRF's
    authentication classes; this covers login with a wrong password.
    """

    default_error_code: str = "INVALID_CREDENTIALS"
    status_code: int = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when user lacks permission for an operation.

    Example:
        if not chat.is_admin(user):
            raise PermissionDeniedError(
                "Only the group admin can rename the group",
                error_code="ADMIN_REQUIRED",
            )
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = status.HTTP_403_FORBIDDEN


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Example:
        user = User.objects.filter(id=user_id).first()
        if not user:
            raise NotFoundError(
                f"User with ID {user_id} not found",
                error_code="USER_NOT_FOUND",
                details={"user_id": user_id},
            )
    """

    default_error_code: str = "NOT_FOUND"
    status_code: int = status.HTTP_404_NOT_FOUND


class ConflictError(BaseApplicationError):
    """
    Raised when operation conflicts with current resource state.

    Example:
        if User.objects.filter(email=email).exists():
            raise ConflictError(
                "User already exists",
                error_code="EMAIL_EXISTS",
            )
    """

    default_error_code: str = "CONFLICT"
    status_code: int = status.HTTP_409_CONFLICT


def application_exception_handler(exc, context):
    """
    DRF exception handler that also renders BaseApplicationError.

    Registered via REST_FRAMEWORK["EXCEPTION_HANDLER"]. DRF's own
    exceptions (serializer validation, authentication, Http404) keep the
    default rendering; anything else returns None and surfaces as a 500.
    """
    # DRF views pull in auth models; core itself loads before the app registry is ready
    from rest_framework.response import Response
    from rest_framework.views import exception_handler

    if isinstance(exc, BaseApplicationError):
        view = context.get("view")
        logger.info(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
        )
        return Response(exc.to_dict(), status=exc.status_code)

    return exception_handler(exc, context)
