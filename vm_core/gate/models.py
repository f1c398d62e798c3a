# vm_core/gate/models.py
import uuid

from django.conf import settings
from django.db import models

DEFAULT_GATE = "Main Gate"


class EntryResult(models.TextChoices):
    GRANTED = "granted", "Granted"
    DENIED = "denied", "Denied"


class ReasonCode(models.TextChoices):
    CODE_NOT_FOUND = "CODE_NOT_FOUND", "Code not found"
    CODE_CANCELLED = "CODE_CANCELLED", "Code cancelled"
    INVALID_DATE = "INVALID_DATE", "Invalid date"
    TOO_EARLY = "TOO_EARLY", "Too early"
    CODE_EXPIRED = "CODE_EXPIRED", "Code expired"
    CODE_ALREADY_USED = "CODE_ALREADY_USED", "Code already used"
    GRANTED = "GRANTED", "Granted"


class EntryLogImmutable(Exception):
    pass


class EntryLogQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise EntryLogImmutable("Entry logs are append-only.")

    def delete(self):
        raise EntryLogImmutable("Entry logs are append-only.")


class EntryLog(models.Model):
    """
    Immutable audit record of one validation attempt at the gate.
    Denials are kept; validated_at is the authoritative instant for reporting.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    access_code = models.ForeignKey(
        "access_codes.AccessCode",
        on_delete=models.PROTECT,
        related_name="entry_logs",
        null=True,
        blank=True,
    )
    submitted_code = models.CharField(max_length=5)

    resident = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="visitor_entries",
        null=True,
        blank=True,
    )
    security = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="gate_validations",
    )

    # Guard's estate at validation time (null for unscoped superusers).
    estate_id = models.UUIDField(null=True, blank=True, db_index=True)

    result = models.CharField(max_length=16, choices=EntryResult.choices, db_index=True)
    reason_code = models.CharField(max_length=32, choices=ReasonCode.choices)
    reason = models.CharField(max_length=255, blank=True, default="")

    gate = models.CharField(max_length=100, default=DEFAULT_GATE)

    validated_at = models.DateTimeField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = EntryLogQuerySet.as_manager()

    class Meta:
        db_table = "gate_entry_log"
        indexes = [
            models.Index(fields=["estate_id", "validated_at"], name="entrylog_estate_time_idx"),
            models.Index(fields=["security", "validated_at"], name="entrylog_security_time_idx"),
            models.Index(fields=["resident", "result", "validated_at"], name="entrylog_resident_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise EntryLogImmutable("Entry logs are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise EntryLogImmutable("Entry logs are append-only.")

    def __str__(self) -> str:
        return f"{self.submitted_code} {self.result} ({self.reason_code}) @ {self.validated_at:%Y-%m-%d %H:%M}"
