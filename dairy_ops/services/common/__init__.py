"""Shared service-layer building blocks."""

from .errors import (
    AuthorizationError,
    ConflictError,
    InsufficientStateError,
    NotFoundError,
    ServiceError,
    TransactionError,
    ValidationError,
)
from .permissions import PermissionDenied, Principal, require_member_access, require_role
from .unit_of_work import UnitOfWork

__all__ = [
    "AuthorizationError",
    "ConflictError",
    "InsufficientStateError",
    "NotFoundError",
    "ServiceError",
    "TransactionError",
    "ValidationError",
    "PermissionDenied",
    "Principal",
    "require_member_access",
    "require_role",
    "UnitOfWork",
]
