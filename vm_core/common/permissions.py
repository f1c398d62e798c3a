# vm_core/common/permissions.py

from __future__ import annotations

from typing import Set

from rest_framework.permissions import BasePermission

from vm_core.iam.models import MembershipRole
from vm_core.iam.selectors import get_active_membership

ROLE_RESIDENT = MembershipRole.RESIDENT.value
ROLE_SECURITY = MembershipRole.SECURITY.value
ROLE_ADMIN = MembershipRole.ADMIN.value


def _user_roles(user) -> Set[str]:
    """
    Resolve roles from:
    1) superuser flag (treated as ADMIN across every estate)
    2) the user's active EstateMembership

    Returns set of role strings (empty when unauthenticated or unassigned).
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False):
        roles.add(ROLE_ADMIN)
        return roles

    membership = get_active_membership(user_id=user.id)
    if membership is not None:
        roles.add(membership.role)

    return roles


class _RolePermission(BasePermission):
    allowed_roles: Set[str] = set()
    message = "You do not have permission to perform this action."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(_user_roles(user) & self.allowed_roles)


class IsResident(_RolePermission):
    allowed_roles = {ROLE_RESIDENT}
    message = "Only residents can manage access codes."


class IsSecurity(_RolePermission):
    allowed_roles = {ROLE_SECURITY}
    message = "Only security personnel can validate access codes."


class IsEstateAdmin(_RolePermission):
    allowed_roles = {ROLE_ADMIN}
    message = "Only estate administrators can view this resource."
