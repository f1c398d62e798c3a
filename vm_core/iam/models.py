# vm_core/iam/models.py
import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from vm_core.estates.models import Estate, Home


class MembershipRole(models.TextChoices):
    RESIDENT = "RESIDENT", "Resident"
    SECURITY = "SECURITY", "Security"
    ADMIN = "ADMIN", "Estate Admin"


class EstateMembership(models.Model):
    """
    Binds a login to one estate with one role.
    Residents additionally point at their home (used for the address snapshot at the gate).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="estate_membership")
    estate = models.ForeignKey(Estate, on_delete=models.PROTECT, related_name="memberships")
    home = models.ForeignKey(Home, on_delete=models.PROTECT, related_name="residents", null=True, blank=True)

    role = models.CharField(max_length=16, choices=MembershipRole.choices, db_index=True)
    phone = models.CharField(max_length=20, blank=True, default="")

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_estate_membership"
        indexes = [
            models.Index(fields=["estate", "role", "is_active"], name="membership_estate_role_idx"),
        ]

    def clean(self):
        if self.role == MembershipRole.RESIDENT and not self.home_id:
            raise ValidationError({"home": "Residents must be attached to a home."})
        if self.home_id and self.home.estate_id != self.estate_id:
            raise ValidationError({"home": "Home belongs to a different estate."})

    def __str__(self) -> str:
        return f"{self.user} ({self.role} @ {self.estate_id})"
