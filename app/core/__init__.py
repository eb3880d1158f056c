"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code shared by the domain apps
(authentication, chat):

- Generic, reusable base classes (no chat-specific logic)
- Application exception hierarchy and its DRF exception handler
- Infrastructure endpoints (health check) and OpenAPI grouping

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - AuthenticationError: Bad login credentials
    - PermissionDeniedError: Authorization failures
    - NotFoundError: Resource not found
    - ConflictError: State conflicts (duplicates, etc.)

Note:
    Django models are NOT imported here to avoid AppRegistryNotReady
    errors. Import them directly from core.models.
"""

# Services (no Django model dependencies)
from .services import BaseService, ServiceResult

# Exceptions (no Django model dependencies)
from .exceptions import (
    AuthenticationError,
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "AuthenticationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
]
