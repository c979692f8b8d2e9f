# dairy_ops/services/common/permissions.py
"""
Caller identity and role checks for the service layer.

The request layer authenticates the caller and hands services a
``Principal``; services only decide whether that principal may act on
a given resource.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional
from uuid import UUID

from dairy_ops.models.enums import UserRole

from .errors import AuthorizationError


class PermissionDenied(AuthorizationError):
    """Raised when a user lacks the required role or ownership."""

    def __init__(
        self,
        message: str,
        user_id: Optional[UUID] = None,
        role: Optional[UserRole] = None,
    ) -> None:
        super().__init__(message)
        self.user_id = user_id
        self.role = role


@dataclass(frozen=True)
class Principal:
    """
    Represents an authenticated caller in the service layer.

    Attributes:
        user_id: Unique identifier for the user
        role: User's role
        member_id: Member profile for MEMBER callers
        agency_id: Agency profile for AGENCY callers
    """
    user_id: UUID
    role: UserRole
    member_id: Optional[UUID] = None
    agency_id: Optional[UUID] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def has_any_role(self, roles: Iterable[UserRole]) -> bool:
        return self.role in set(roles)

    def owns_member(self, member_id: UUID) -> bool:
        return self.member_id is not None and self.member_id == member_id


def require_role(
    principal: Principal,
    allowed_roles: Iterable[UserRole],
    *,
    error_message: Optional[str] = None,
) -> None:
    """
    Assert that principal has one of the allowed roles.

    Raises:
        PermissionDenied: If principal lacks required role

    Example:
        >>> require_role(principal, [UserRole.ADMIN])
    """
    allowed = list(allowed_roles)
    if not principal.has_any_role(allowed):
        roles_str = ", ".join(r.value for r in allowed)
        msg = error_message or (
            f"User {principal.user_id} with role '{principal.role.value}' "
            f"does not have one of required roles: {roles_str}"
        )
        raise PermissionDenied(msg, user_id=principal.user_id, role=principal.role)


def require_member_access(principal: Principal, member_id: UUID) -> None:
    """Admins may act on any member; members only on themselves."""
    if principal.is_admin:
        return
    if principal.role == UserRole.MEMBER and principal.owns_member(member_id):
        return
    raise PermissionDenied(
        "You do not have access to this member's records",
        user_id=principal.user_id,
        role=principal.role,
    )
