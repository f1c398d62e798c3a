# vm_core/common/scope.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from rest_framework.exceptions import PermissionDenied, ValidationError

from vm_core.iam.selectors import get_active_membership

HDR_ESTATE = "X-Estate-Id"


def _get_header(request, name: str) -> Optional[str]:
    """
    request.headers is case-insensitive; fallback to META for pytest/client.
    """
    v = request.headers.get(name)
    if v:
        return v
    return request.META.get("HTTP_" + name.upper().replace("-", "_"))


def resolve_estate_id(request) -> Optional[UUID]:
    """
    Estate the caller acts in.

    - Members act in their own estate; the header is ignored for them.
    - Superusers act across estates; X-Estate-Id narrows them to one.
      Returns None for an unscoped superuser.
    """
    user = request.user

    if getattr(user, "is_superuser", False):
        raw = _get_header(request, HDR_ESTATE)
        if not raw:
            return None
        try:
            return UUID(str(raw))
        except ValueError:
            raise ValidationError({HDR_ESTATE: "Invalid UUID"})

    membership = get_active_membership(user_id=user.id)
    if membership is None:
        raise PermissionDenied("No active estate membership.")
    return membership.estate_id
