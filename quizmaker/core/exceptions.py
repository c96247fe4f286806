"""
Service Exceptions

Typed error kinds raised by the service layer. The HTTP layer switches on
``ServiceError.kind`` to pick a status code; it never inspects the message.
"""

import enum
from typing import Any, Dict, Optional


class ErrorKind(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION_FAILED = "validation_failed"
    INVALID_STATE = "invalid_state"
    STORE_ERROR = "store_error"


class ServiceError(Exception):
    """Base class for every error surfaced by the service layer."""

    kind: ErrorKind = ErrorKind.STORE_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnauthenticatedError(ServiceError):
    kind = ErrorKind.UNAUTHENTICATED


class InvalidCredentialsError(UnauthenticatedError):
    pass


class ForbiddenError(ServiceError):
    kind = ErrorKind.FORBIDDEN


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(ServiceError):
    kind = ErrorKind.CONFLICT


class DuplicateEmailError(ConflictError):
    pass


class ActiveAttemptExistsError(ConflictError):
    pass


class ValidationFailedError(ServiceError):
    kind = ErrorKind.VALIDATION_FAILED


class InvalidInstructorError(ValidationFailedError):
    pass


class InvalidStateError(ServiceError):
    kind = ErrorKind.INVALID_STATE


class StoreError(ServiceError):
    """Unexpected persistence failure (connectivity, constraint, driver)."""
    kind = ErrorKind.STORE_ERROR
