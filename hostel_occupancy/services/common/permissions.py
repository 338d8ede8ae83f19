"""
Permission and authorization utilities.

The occupancy core consumes an already-resolved actor; it checks the
actor's role and, for hostel-scoped resources, whether the actor owns the
hostel.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from hostel_occupancy.core.exceptions import AuthorizationError
from hostel_occupancy.models.base.enums import UserRole


@dataclass(frozen=True)
class Principal:
    """
    Represents an authenticated user in the service layer.

    Attributes:
        user_id: Unique identifier for the user
        role: User's primary role
        metadata: Optional additional user context
    """
    user_id: str
    role: UserRole
    metadata: dict = field(default_factory=dict)

    def has_role(self, role: UserRole) -> bool:
        return self.role == role

    def has_any_role(self, roles: Iterable[UserRole]) -> bool:
        return self.role in set(roles)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def role_in(principal: Principal, allowed_roles: Iterable[UserRole]) -> bool:
    """Check if principal's role is in the allowed set."""
    return principal.has_any_role(allowed_roles)


def is_hostel_manager(principal: Principal, hostel) -> bool:
    """Admins manage every hostel; owners manage the hostels they own."""
    if principal.is_admin:
        return True
    return principal.role == UserRole.OWNER and hostel is not None and hostel.owner_id == principal.user_id


def is_booking_party(principal: Principal, booking, hostel) -> bool:
    """The booking's user, the hostel's manager, or an admin."""
    return booking.user_id == principal.user_id or is_hostel_manager(principal, hostel)


def is_maintenance_staff(principal: Principal, hostel) -> bool:
    """Staff work on every hostel's tickets; managers on their own hostels'."""
    return principal.role == UserRole.STAFF or is_hostel_manager(principal, hostel)


def require_role(principal: Principal, allowed_roles: Iterable[UserRole], action: Optional[str] = None) -> None:
    if not role_in(principal, allowed_roles):
        raise AuthorizationError(
            f"Role '{principal.role}' is not allowed to {action or 'perform this action'}",
            action=action,
        )


def require_hostel_manager(principal: Principal, hostel, action: Optional[str] = None) -> None:
    if not is_hostel_manager(principal, hostel):
        raise AuthorizationError(
            f"Only the hostel owner or an admin may {action or 'perform this action'}",
            action=action,
        )


def require_maintenance_staff(principal: Principal, hostel, action: Optional[str] = None) -> None:
    if not is_maintenance_staff(principal, hostel):
        raise AuthorizationError(
            f"Only maintenance staff or the hostel owner may {action or 'perform this action'}",
            action=action,
        )


def require_booking_party(principal: Principal, booking, hostel, action: Optional[str] = None) -> None:
    if not is_booking_party(principal, booking, hostel):
        raise AuthorizationError(
            f"Not authorized to {action or 'access this booking'}",
            action=action,
        )


__all__ = [
    "Principal",
    "role_in",
    "is_hostel_manager",
    "is_booking_party",
    "is_maintenance_staff",
    "require_role",
    "require_hostel_manager",
    "require_booking_party",
    "require_maintenance_staff",
]
