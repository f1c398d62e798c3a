# vm_core/iam/selectors.py
from __future__ import annotations

from typing import Optional

from vm_core.iam.models import EstateMembership


def get_active_membership(*, user_id: int) -> Optional[EstateMembership]:
    return (
        EstateMembership.objects.select_related("estate", "home")
        .filter(user_id=user_id, is_active=True)
        .first()
    )


def display_name(user) -> str:
    if user is None:
        return "Unknown"
    full = f"{user.first_name} {user.last_name}".strip()
    return full or user.get_username()
