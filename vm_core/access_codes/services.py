# vm_core/access_codes/services.py

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from vm_core.access_codes.generator import AccessCodeGenerator, CodeGenerationExhausted
from vm_core.access_codes.models import AccessCode, AccessCodeStatus, to_minute
from vm_core.access_codes.qr import encode_access_code
from vm_core.access_codes.selectors import AccessCodeSelector
from vm_core.common.clock import read_clock

logger = logging.getLogger(__name__)

DEFAULT_INSERT_RETRIES = 1


class CodeNotCancellable(Exception):
    def __init__(self, access_code: AccessCode):
        super().__init__(
            f"Cannot cancel {access_code.status} code. Only active codes can be cancelled."
        )
        self.access_code_id = access_code.id
        self.status = access_code.status


class AccessCodeService:
    """
    Access code write-model operations.

    Notes:
    - Transitions are conditional updates guarded by the expected prior status,
      so concurrent writers never both succeed.
    - The (code, visit_date) partial unique constraint backs the generator's
      check-then-insert; an insert collision costs one more generation round.
    """

    @staticmethod
    def _insert_retries() -> int:
        return max(0, int(getattr(settings, "VM_ACCESS_CODE_INSERT_RETRIES", DEFAULT_INSERT_RETRIES)))

    # -------------------------
    # Create
    # -------------------------
    @staticmethod
    @transaction.atomic
    def create_code(
        *,
        resident_id: int,
        estate_id: UUID,
        visit_date: date,
        start_time: time,
        end_time: time,
        visitor_name: Optional[str] = None,
    ) -> AccessCode:
        """
        Generates a unique code for visit_date and persists it as active.
        Raises CodeGenerationExhausted when no unique code can be stored.
        """
        start_time, end_time = to_minute(start_time), to_minute(end_time)
        if start_time >= end_time:
            raise ValidationError({"end_time": "End time must be after start time."})

        visitor_name = (visitor_name or "").strip() or None
        rounds = 1 + AccessCodeService._insert_retries()

        for attempt in range(1, rounds + 1):
            code = AccessCodeGenerator.generate(visit_date)
            qr_code_data = encode_access_code(code)

            # Savepoint: a constraint violation must not poison the outer transaction.
            try:
                with transaction.atomic(savepoint=True):
                    access_code = AccessCode.objects.create(
                        estate_id=estate_id,
                        code=code,
                        resident_id=resident_id,
                        visit_date=visit_date,
                        start_time=start_time,
                        end_time=end_time,
                        visitor_name=visitor_name,
                        qr_code_data=qr_code_data,
                        status=AccessCodeStatus.ACTIVE,
                    )
            except IntegrityError:
                logger.warning(
                    "Access code insert collided for %s (round %s/%s); regenerating",
                    visit_date,
                    attempt,
                    rounds,
                )
                continue

            logger.info("Access code %s created for resident %s on %s", access_code.id, resident_id, visit_date)
            return access_code

        raise CodeGenerationExhausted(visit_date, rounds, unit="insert rounds")

    # -------------------------
    # Cancel
    # -------------------------
    @staticmethod
    @transaction.atomic
    def cancel_code(*, access_code_id: UUID, owner_id: int, at: Optional[datetime] = None) -> AccessCode:
        """
        active -> cancelled, owner only.
        Raises AccessCodeSelector.NotFound for someone else's code and
        CodeNotCancellable when the code is no longer active.
        """
        ts = read_clock(at).instant

        updated = AccessCode.objects.filter(
            id=access_code_id,
            resident_id=owner_id,
            status=AccessCodeStatus.ACTIVE,
        ).update(status=AccessCodeStatus.CANCELLED, cancelled_at=ts, updated_at=ts)

        access_code = AccessCodeSelector.get_owned_code(access_code_id=access_code_id, owner_id=owner_id)
        if not updated:
            raise CodeNotCancellable(access_code)

        logger.info("Access code %s cancelled by resident %s", access_code.id, owner_id)
        return access_code

    # -------------------------
    # Expiry sweep
    # -------------------------
    @staticmethod
    @transaction.atomic
    def recycle_expired(*, at: Optional[datetime] = None) -> int:
        """
        Moves every active code past its window to expired.
        Idempotent: a second run at the same instant updates zero rows.
        Returns the number of rows transitioned.
        """
        clock = read_clock(at)
        count = AccessCodeSelector.stale_active_codes(clock=clock).update(
            status=AccessCodeStatus.EXPIRED,
            expired_at=clock.instant,
            updated_at=clock.instant,
        )
        logger.info("Expiry sweep marked %s access code(s) expired", count)
        return count
