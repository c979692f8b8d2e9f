# dairy_ops/services/common/errors.py
"""
Service-layer exceptions.

These exceptions are raised by service methods and should be caught
by the request layer to return appropriate responses. Every error
carries a specific, user-presentable message.
"""
from __future__ import annotations

from typing import Any, Optional
from uuid import UUID


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(ServiceError):
    """Raised when a requested resource does not exist."""

    def __init__(
        self,
        resource_type: str,
        identifier: UUID | str | int,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class ValidationError(ServiceError):
    """Raised when input is malformed or out of range."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field


class AuthorizationError(ServiceError):
    """Raised when a caller may not act on a resource."""

    def __init__(
        self,
        message: str = "Authorization failed",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)


class ConflictError(ServiceError):
    """Raised when an operation conflicts with existing data."""

    def __init__(
        self,
        message: str,
        conflicting_field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.conflicting_field = conflicting_field


class InsufficientStateError(ServiceError):
    """Raised when a business rule forbids the operation in the current state."""

    def __init__(
        self,
        rule_name: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.rule_name = rule_name


class TransactionError(ServiceError):
    """Raised when a database transaction fails; nothing was committed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message, details={"error_type": type(original_error).__name__})
        self.original_error = original_error
