# vm_core/access_codes/models.py
from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from vm_core.common.clock import SiteClock, read_clock
from vm_core.common.models import EstateScopedModel


class AccessCodeStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    USED = "used", "Used"
    EXPIRED = "expired", "Expired"
    CANCELLED = "cancelled", "Cancelled"


# Statuses that hold a code value for its visit date.
RESERVING_STATUSES = (AccessCodeStatus.ACTIVE, AccessCodeStatus.USED)


def to_minute(value: time) -> time:
    return value.replace(second=0, microsecond=0)


class AccessCode(EstateScopedModel):
    """
    One visitor-entry authorization for a single date and time window.

    Lifecycle (no transition is reversible):
      active -> used       (gate grant, compare-and-swap)
      active -> cancelled  (owning resident)
      active -> expired    (expiry sweep)
    """
    code = models.CharField(max_length=5, db_index=True)

    resident = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="access_codes",
    )

    visit_date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()

    visitor_name = models.CharField(max_length=255, null=True, blank=True)

    status = models.CharField(
        max_length=16,
        choices=AccessCodeStatus.choices,
        default=AccessCodeStatus.ACTIVE,
        db_index=True,
    )

    qr_code_data = models.TextField(null=True, blank=True)

    used_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    expired_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "access_codes_access_code"
        indexes = [
            models.Index(fields=["visit_date", "status"], name="accesscode_date_status_idx"),
            models.Index(fields=["resident", "status"], name="accesscode_resident_idx"),
            models.Index(fields=["estate_id", "visit_date"], name="accesscode_estate_date_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["code", "visit_date"],
                condition=Q(status__in=["active", "used"]),
                name="uq_accesscode_code_per_day_live",
            ),
            models.CheckConstraint(
                condition=Q(start_time__lt=F("end_time")),
                name="ck_accesscode_window_order",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.code} ({self.visit_date} {self.start_time:%H:%M}-{self.end_time:%H:%M}, {self.status})"

    @property
    def window_start(self) -> time:
        return to_minute(self.start_time)

    @property
    def window_end(self) -> time:
        return to_minute(self.end_time)

    @property
    def expiry_instant(self) -> datetime:
        """
        visit_date + end_time (HH:MM) in the site time zone.
        Derived, never stored as authoritative.
        """
        return timezone.make_aware(datetime.combine(self.visit_date, self.window_end))

    def is_past_window(self, clock: Optional[SiteClock] = None) -> bool:
        """
        True once the local wall clock is beyond end_time on visit_date.
        end_time itself is still inside the window (minute resolution).
        """
        clock = clock or read_clock()
        if self.visit_date < clock.today:
            return True
        return self.visit_date == clock.today and self.window_end < clock.minute
