"""
Custom Exceptions for GradHelper

Hierarchical exception classes for proper error handling across layers.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorKind(str, Enum):
    """Machine-readable error kinds surfaced to API clients."""
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    THREAD_NOT_FOUND = "ThreadNotFound"
    PERSISTENCE_UNAVAILABLE = "PersistenceUnavailable"


class GradHelperError(Exception):
    """Base exception for all GradHelper errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(GradHelperError):
    """Raised when a draft or request fails validation."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.MISSING_REQUIRED_FIELD,
        field: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {"kind": kind.value}
        if field:
            details["field"] = field
        super().__init__(message, details, original_error)
        self.kind = kind
        self.field = field


class NotFoundError(GradHelperError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.THREAD_NOT_FOUND,
        thread_id: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {"kind": kind.value}
        if thread_id:
            details["thread_id"] = thread_id
        super().__init__(message, details, original_error)
        self.kind = kind
        self.thread_id = thread_id


class PersistenceError(GradHelperError):
    """Raised when loading or saving messages fails after retries."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        retry_count: int = 0,
        original_error: Optional[Exception] = None
    ):
        details = {
            "kind": ErrorKind.PERSISTENCE_UNAVAILABLE.value,
            "retry_count": retry_count,
        }
        if operation:
            details["operation"] = operation
        super().__init__(message, details, original_error)


class ConfigurationError(GradHelperError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
